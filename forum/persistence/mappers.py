"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict, Optional
from uuid import UUID

from forum.domain.model import AccessGrant, Comment, Content, Forum, Post, User
from forum.domain.value import (
    AccessGrantId,
    AccessLevel,
    CommentId,
    ContentId,
    ContentType,
    ForumId,
    ForumName,
    PostId,
    StorageMode,
    UserId,
    Username,
)


def _uuid(value: Any) -> Optional[UUID]:
    """Normalize a UUID column value (drivers may hand back strings)."""
    if value is None:
        return None
    return UUID(value) if isinstance(value, str) else value


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(_uuid(row["id"])),
        username=Username(row["username"]),
        email=row.get("email"),
        display_name=row.get("display_name"),
        active=row["active"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict."""
    return user.model_dump()


def row_to_forum(row: Dict[str, Any]) -> Forum:
    """Convert database row to Forum domain model."""
    parent_id = _uuid(row.get("parent_id"))
    return Forum(
        id=ForumId(_uuid(row["id"])),
        name=ForumName(row["name"]),
        description=row.get("description"),
        parent_id=ForumId(parent_id) if parent_id else None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def forum_to_dict(forum: Forum) -> Dict[str, Any]:
    """Convert Forum domain model to database dict."""
    return forum.model_dump()


def row_to_access_grant(row: Dict[str, Any]) -> AccessGrant:
    """Convert database row to AccessGrant domain model."""
    return AccessGrant(
        id=AccessGrantId(_uuid(row["id"])),
        user_id=UserId(_uuid(row["user_id"])),
        forum_id=ForumId(_uuid(row["forum_id"])),
        level=AccessLevel(row["level"]),
        granted_at=row["granted_at"],
        updated_at=row["updated_at"],
    )


def access_grant_to_dict(grant: AccessGrant) -> Dict[str, Any]:
    """Convert AccessGrant domain model to database dict.

    Enum columns get the plain string value.
    """
    grant_dict = grant.model_dump()
    grant_dict["level"] = grant.level.value
    return grant_dict


def row_to_post(row: Dict[str, Any]) -> Post:
    """Convert database row to Post domain model."""
    return Post(
        id=PostId(_uuid(row["id"])),
        forum_id=ForumId(_uuid(row["forum_id"])),
        author_id=UserId(_uuid(row["author_id"])),
        title=row["title"],
        body=row["body"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def post_to_dict(post: Post) -> Dict[str, Any]:
    """Convert Post domain model to database dict."""
    return post.model_dump()


def row_to_comment(row: Dict[str, Any]) -> Comment:
    """Convert database row to Comment domain model."""
    parent_id = _uuid(row.get("parent_id"))
    return Comment(
        id=CommentId(_uuid(row["id"])),
        post_id=PostId(_uuid(row["post_id"])),
        author_id=UserId(_uuid(row["author_id"])),
        body=row["body"],
        parent_id=CommentId(parent_id) if parent_id else None,
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def comment_to_dict(comment: Comment) -> Dict[str, Any]:
    """Convert Comment domain model to database dict."""
    return comment.model_dump()


def row_to_content(row: Dict[str, Any]) -> Content:
    """Convert database row to Content domain model."""
    post_id = _uuid(row.get("post_id"))
    comment_id = _uuid(row.get("comment_id"))
    data = row.get("data")
    return Content(
        id=ContentId(_uuid(row["id"])),
        post_id=PostId(post_id) if post_id else None,
        comment_id=CommentId(comment_id) if comment_id else None,
        filename=row["filename"],
        description=row.get("description"),
        content_type=ContentType(row["content_type"]),
        storage_mode=StorageMode(row["storage_mode"]),
        storage_ref=row["storage_ref"],
        data=bytes(data) if data is not None else None,
        size=row["size"],
        created_at=row["created_at"],
    )


def content_to_dict(content: Content) -> Dict[str, Any]:
    """Convert Content domain model to database dict.

    Enum columns get the plain string value.
    """
    content_dict = content.model_dump()
    content_dict["content_type"] = content.content_type.value
    content_dict["storage_mode"] = content.storage_mode.value
    return content_dict
