"""Content store port.

The engine never touches blob bytes on disk directly; it goes through this
interface. Implementations live in ``forum.adapter.storage``.
"""

from abc import ABC, abstractmethod


class ContentStore(ABC):
    """Opaque store for content blobs.

    Implementations raise ``forum.domain.error.StorageError`` for any I/O
    failure and enforce no access policy of their own.
    """

    @abstractmethod
    async def store(self, data: bytes, suggested_name: str) -> str:
        """Persist a blob.

        Args:
            data: Blob bytes
            suggested_name: Original filename, used for the extension only

        Returns:
            Reference to pass to ``fetch`` and ``delete``
        """
        pass

    @abstractmethod
    async def fetch(self, storage_ref: str) -> bytes:
        """Read a blob back."""
        pass

    @abstractmethod
    async def delete(self, storage_ref: str) -> None:
        """Remove a blob. Removing a missing blob is not an error."""
        pass
