"""Unit tests for FilesystemContentStore."""

import pytest

from forum.adapter.storage.filesystem import FilesystemContentStore
from forum.domain.error import StorageError


class TestFilesystemContentStore:
    """Tests against a temporary directory."""

    @pytest.mark.asyncio
    async def test_store_fetch_delete(self, tmp_path):
        """A stored blob can be read back and removed."""
        # Arrange
        store = FilesystemContentStore(tmp_path / "blobs")

        # Act
        ref = await store.store(b"hello", "Greeting.TXT")

        # Assert
        assert ref.endswith(".txt")
        assert (tmp_path / "blobs" / ref).read_bytes() == b"hello"
        assert await store.fetch(ref) == b"hello"

        await store.delete(ref)
        assert not (tmp_path / "blobs" / ref).exists()

    @pytest.mark.asyncio
    async def test_refs_are_unique(self, tmp_path):
        """The same suggested name never overwrites an earlier blob."""
        store = FilesystemContentStore(tmp_path)

        first = await store.store(b"one", "photo.png")
        second = await store.store(b"two", "photo.png")

        assert first != second
        assert await store.fetch(first) == b"one"

    @pytest.mark.asyncio
    async def test_deleting_missing_blob_is_fine(self, tmp_path):
        """Deleting an absent file does not raise."""
        store = FilesystemContentStore(tmp_path)

        await store.delete("does-not-exist.png")

    @pytest.mark.asyncio
    async def test_fetching_missing_blob(self, tmp_path):
        """Reading an absent file is a StorageError."""
        store = FilesystemContentStore(tmp_path)

        with pytest.raises(StorageError):
            await store.fetch("does-not-exist.png")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ref", ["../escape.txt", "nested/file.txt", "/etc/passwd"])
    async def test_refs_outside_root_are_refused(self, tmp_path, ref):
        """References must name a file directly inside the storage root."""
        store = FilesystemContentStore(tmp_path / "blobs")

        with pytest.raises(StorageError):
            await store.fetch(ref)
        with pytest.raises(StorageError):
            await store.delete(ref)
