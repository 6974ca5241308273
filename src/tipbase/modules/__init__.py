"""Feature modules with auto-discovery."""

from importlib import import_module
from pathlib import Path

import structlog
from fastapi import APIRouter


logger = structlog.get_logger()


def discover_modules() -> list[APIRouter]:
    """Auto-discover and return routers from all modules.

    Scans the modules directory for packages exposing a ``router``
    attribute, or a ``routers`` list when a module serves more than one
    path prefix.

    Returns:
        List of FastAPI routers from discovered modules.
    """
    modules_dir = Path(__file__).parent
    routers: list[APIRouter] = []

    for path in sorted(modules_dir.iterdir()):
        if path.is_dir() and not path.name.startswith("_"):
            try:
                module = import_module(f"tipbase.modules.{path.name}")
            except ImportError as e:
                logger.warning("module_load_failed", module=path.name, error=str(e))
                continue

            found = getattr(module, "routers", None)
            if found is None and hasattr(module, "router"):
                found = [module.router]
            if found:
                routers.extend(found)
                logger.info("module_loaded", module=path.name, routers=len(found))

    return routers
