"""Domain value objects for the forum engine."""

from forum.domain.value.identifiers import (
    AccessGrantId,
    CommentId,
    ContentId,
    ForumId,
    PostId,
    UserId,
)
from forum.domain.value.types import (
    AccessLevel,
    ContentType,
    ForumName,
    StorageMode,
    Username,
)

__all__ = [
    # Identifiers
    "UserId",
    "ForumId",
    "AccessGrantId",
    "PostId",
    "CommentId",
    "ContentId",
    # Types
    "AccessLevel",
    "ContentType",
    "StorageMode",
    "ForumName",
    "Username",
]
