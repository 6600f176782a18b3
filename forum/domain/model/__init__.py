"""Domain model entities for the forum engine."""

from forum.domain.model.access import AccessGrant
from forum.domain.model.comment import Comment
from forum.domain.model.content import Content
from forum.domain.model.forum import Forum
from forum.domain.model.post import Post
from forum.domain.model.user import User

__all__ = [
    "User",
    "Forum",
    "AccessGrant",
    "Post",
    "Comment",
    "Content",
]
