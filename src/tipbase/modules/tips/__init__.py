"""Tips module: the knowledge-base entries themselves."""

from fastapi import APIRouter


router = APIRouter(prefix="/tips", tags=["tips"])

# Import routes to register them (must be after router is defined)
from tipbase.modules.tips import routes  # noqa: F401, E402


# Module metadata
__module__ = {
    "name": "tips",
    "version": "1.0.0",
    "description": "Create, search, edit and retire tips",
    "dependencies": [],
}
