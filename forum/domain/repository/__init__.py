"""Repository interfaces for the forum domain.

Contracts live in the domain layer; implementations live in persistence.
"""

from forum.domain.repository.access import AccessRepository
from forum.domain.repository.comment import CommentRepository
from forum.domain.repository.content import ContentRepository
from forum.domain.repository.forum import ForumRepository
from forum.domain.repository.post import PostRepository
from forum.domain.repository.user import UserRepository

__all__ = [
    "UserRepository",
    "ForumRepository",
    "AccessRepository",
    "PostRepository",
    "CommentRepository",
    "ContentRepository",
]
