"""In-memory content store for testing."""

from uuid import uuid4

from forum.domain.error import StorageError
from forum.domain.service.content_store import ContentStore


class MockContentStore(ContentStore):
    """Dict-backed content store.

    Refs listed in ``fail_on_delete`` make ``delete`` raise StorageError,
    and ``fail_on_store`` makes every ``store`` call fail, simulating I/O
    errors.
    """

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.deleted: list[str] = []
        self.fail_on_delete: set[str] = set()
        self.fail_on_store = False

    async def store(self, data: bytes, suggested_name: str) -> str:
        """Keep a blob in memory."""
        if self.fail_on_store:
            raise StorageError("Simulated store failure")
        ref = f"mock-{uuid4()}-{suggested_name}"
        self.blobs[ref] = data
        return ref

    async def fetch(self, storage_ref: str) -> bytes:
        """Return a stored blob."""
        try:
            return self.blobs[storage_ref]
        except KeyError as e:
            raise StorageError(f"No such blob: {storage_ref}") from e

    async def delete(self, storage_ref: str) -> None:
        """Forget a blob, or fail if told to."""
        if storage_ref in self.fail_on_delete:
            raise StorageError(f"Simulated delete failure: {storage_ref}")
        self.blobs.pop(storage_ref, None)
        self.deleted.append(storage_ref)
