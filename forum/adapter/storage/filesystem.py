"""Filesystem content store.

Blobs are written as ``<uuid><ext>`` files in a single directory. The
reference handed back to the engine is the bare filename, so the storage
directory can move without touching the database.
"""

import asyncio
from pathlib import Path, PurePath
from uuid import uuid4

import logfire

from forum.domain.error import StorageError
from forum.domain.service.content_store import ContentStore


class FilesystemContentStore(ContentStore):
    """Content store backed by a local directory.

    Blocking file I/O runs in a worker thread.
    """

    def __init__(self, root: str | Path) -> None:
        """Initialize store.

        Args:
            root: Storage directory, created on first write
        """
        self.root = Path(root).resolve()

    async def store(self, data: bytes, suggested_name: str) -> str:
        """Write a blob under a fresh name keeping the suggested extension."""
        ref = f"{uuid4()}{PurePath(suggested_name).suffix.lower()}"
        path = self._path_for(ref)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            logfire.error("Failed to store blob", storage_ref=ref, error=str(e))
            raise StorageError(f"Could not store blob {ref}: {e}") from e
        logfire.debug("Blob stored", storage_ref=ref, size=len(data))
        return ref

    async def fetch(self, storage_ref: str) -> bytes:
        """Read a blob."""
        path = self._path_for(storage_ref)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise StorageError(f"Could not read blob {storage_ref}: {e}") from e

    async def delete(self, storage_ref: str) -> None:
        """Remove a blob; a missing file is fine."""
        path = self._path_for(storage_ref)
        try:
            await asyncio.to_thread(path.unlink, True)
        except OSError as e:
            raise StorageError(f"Could not delete blob {storage_ref}: {e}") from e
        logfire.debug("Blob deleted", storage_ref=storage_ref)

    def _path_for(self, storage_ref: str) -> Path:
        """Resolve a reference, refusing anything outside the storage root."""
        path = (self.root / storage_ref).resolve()
        if path.parent != self.root:
            raise StorageError(f"Invalid storage reference: {storage_ref}")
        return path

    def _write(self, path: Path, data: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
