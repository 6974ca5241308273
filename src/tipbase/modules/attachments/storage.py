"""On-disk storage for uploaded attachment files."""

import asyncio
import uuid
from pathlib import Path
from typing import Annotated

import structlog
from fastapi import Depends

from tipbase.config import settings


logger = structlog.get_logger()


class AttachmentStorage:
    """Stores files under a single directory with generated names.

    Blocking filesystem calls run in a worker thread.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def path_for(self, filename: str) -> Path:
        # Generated names never contain separators; refuse anything else
        path = self.root / Path(filename).name
        if path.name != filename:
            raise ValueError(f"Invalid stored filename: {filename!r}")
        return path

    async def save(self, data: bytes, original_name: str) -> str:
        """Write a file and return the generated name it was stored under."""
        filename = f"{uuid.uuid4().hex}{Path(original_name).suffix.lower()}"
        await asyncio.to_thread(self._write, self.root / filename, data)
        return filename

    async def remove(self, filename: str) -> bool:
        """Delete a stored file. Returns False if it was already gone."""
        try:
            await asyncio.to_thread(self.path_for(filename).unlink)
        except FileNotFoundError:
            logger.warning("attachment_file_missing", filename=filename)
            return False
        return True

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)


def get_attachment_storage() -> AttachmentStorage:
    """Dependency returning storage rooted at the configured upload directory."""
    return AttachmentStorage(settings.upload_dir / "tips")


Storage = Annotated[AttachmentStorage, Depends(get_attachment_storage)]
