"""In-memory repository implementations for testing."""

from .access import InMemoryAccessRepository
from .comment import InMemoryCommentRepository
from .content import InMemoryContentRepository
from .forum import InMemoryForumRepository
from .post import InMemoryPostRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryAccessRepository",
    "InMemoryCommentRepository",
    "InMemoryContentRepository",
    "InMemoryForumRepository",
    "InMemoryPostRepository",
    "InMemoryUserRepository",
]
