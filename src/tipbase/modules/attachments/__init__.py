"""Attachments module: files uploaded against a tip."""

from fastapi import APIRouter


tip_attachments_router = APIRouter(prefix="/tips/{tip_id}/attachments", tags=["attachments"])
router = APIRouter(prefix="/attachments", tags=["attachments"])

# Import routes to register them (must be after routers are defined)
from tipbase.modules.attachments import routes  # noqa: F401, E402


routers = [tip_attachments_router, router]

# Module metadata
__module__ = {
    "name": "attachments",
    "version": "1.0.0",
    "description": "File attachments on tips",
    "dependencies": ["tips"],
}
