"""Test configuration and shared helpers."""

from datetime import datetime, timedelta
from uuid import uuid4

from dishka import AsyncContainer

from forum.domain.model import Comment, Post, User
from forum.domain.repository import CommentRepository, PostRepository, UserRepository
from forum.domain.value import CommentId, ForumId, PostId, UserId, Username

# Seeded records get strictly increasing timestamps so "oldest first"
# orderings are deterministic.
_clock = {"now": datetime(2024, 1, 1)}


def _tick() -> datetime:
    _clock["now"] += timedelta(seconds=1)
    return _clock["now"]


async def make_user(
    env: AsyncContainer, username: str | None = None, active: bool = True
) -> User:
    """Store a user directly in the repository.

    Args:
        env: Request-scoped test container
        username: Username (random if omitted)
        active: Whether the user is active

    Returns:
        Saved user
    """
    repo = await env.get(UserRepository)
    now = _tick()
    user = User(
        id=UserId(uuid4()),
        username=Username(username or f"user-{uuid4().hex[:8]}"),
        active=active,
        created_at=now,
        updated_at=now,
    )
    return await repo.save(user)


async def make_post(
    env: AsyncContainer,
    forum_id: ForumId,
    author_id: UserId,
    title: str = "A post",
) -> Post:
    """Store a post directly, bypassing access checks."""
    repo = await env.get(PostRepository)
    now = _tick()
    post = Post(
        id=PostId(uuid4()),
        forum_id=forum_id,
        author_id=author_id,
        title=title,
        body="Body text",
        created_at=now,
        updated_at=now,
    )
    return await repo.save(post)


async def make_comment(
    env: AsyncContainer,
    post_id: PostId,
    author_id: UserId,
    parent_id: CommentId | None = None,
    body: str = "A comment",
) -> Comment:
    """Store a comment directly, bypassing access checks."""
    repo = await env.get(CommentRepository)
    now = _tick()
    comment = Comment(
        id=CommentId(uuid4()),
        post_id=post_id,
        author_id=author_id,
        body=body,
        parent_id=parent_id,
        created_at=now,
        updated_at=now,
    )
    return await repo.save(comment)
