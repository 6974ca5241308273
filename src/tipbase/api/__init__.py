"""API layer: the root router lives in tipbase.api.router."""
