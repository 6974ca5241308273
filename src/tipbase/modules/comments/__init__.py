"""Comments module: threaded discussion under each tip.

Comments are listed and created under their tip, and edited or
removed through their own ID, so the module serves two path prefixes.
"""

from fastapi import APIRouter


tip_comments_router = APIRouter(prefix="/tips/{tip_id}/comments", tags=["comments"])
router = APIRouter(prefix="/comments", tags=["comments"])

# Import routes to register them (must be after routers are defined)
from tipbase.modules.comments import routes  # noqa: F401, E402


routers = [tip_comments_router, router]

# Module metadata
__module__ = {
    "name": "comments",
    "version": "1.0.0",
    "description": "Threaded comments on tips",
    "dependencies": ["tips"],
}
