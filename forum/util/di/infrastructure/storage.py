"""Content storage infrastructure providers."""

from dishka import Scope, provide

from forum.adapter.storage.filesystem import FilesystemContentStore
from forum.config import StorageSettings
from forum.domain.service import ContentStore
from forum.util.di.base import ProviderBase


class StorageProvider(ProviderBase):
    """Content storage component base."""

    __mock_component__ = "storage"


class ProdStorageProvider(StorageProvider):
    """Production storage provider writing blobs to the local filesystem."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_content_store(self, storage_settings: StorageSettings) -> ContentStore:
        """Provide filesystem content store rooted at the configured path."""
        return FilesystemContentStore(storage_settings.path)
