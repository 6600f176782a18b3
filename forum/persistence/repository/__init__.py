"""PostgreSQL repository implementations."""

from forum.persistence.repository.access import PostgresAccessRepository
from forum.persistence.repository.comment import PostgresCommentRepository
from forum.persistence.repository.content import PostgresContentRepository
from forum.persistence.repository.forum import PostgresForumRepository
from forum.persistence.repository.post import PostgresPostRepository
from forum.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresUserRepository",
    "PostgresForumRepository",
    "PostgresAccessRepository",
    "PostgresPostRepository",
    "PostgresCommentRepository",
    "PostgresContentRepository",
]
