"""Core services and cross-cutting concerns.

This module intentionally does not re-export symbols from submodules
to avoid circular imports. Import directly from submodules when needed:

- tipbase.core.database: Base, get_db, mixins
- tipbase.core.errors: AppException, NotFoundError, etc.
- tipbase.core.identity: request id and identity middleware
- tipbase.core.logging: request logging middleware
- tipbase.core.audit: change tracking engine
"""
