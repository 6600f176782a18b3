"""In-memory post repository for testing."""

from typing import Optional

from forum.domain.model.post import Post
from forum.domain.repository.post import PostRepository
from forum.domain.value import ForumId, PostId


class InMemoryPostRepository(PostRepository):
    """In-memory implementation of PostRepository for testing."""

    def __init__(self) -> None:
        self._posts: dict[PostId, Post] = {}

    async def find_by_id(self, post_id: PostId) -> Optional[Post]:
        """Find a post by ID."""
        return self._posts.get(post_id)

    async def find_by_forum(
        self,
        forum_id: ForumId,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Post]:
        """Find posts in a forum, newest first."""
        posts = [p for p in self._posts.values() if p.forum_id == forum_id]
        posts.sort(key=lambda p: p.created_at, reverse=True)
        if limit is None:
            return posts[offset:]
        return posts[offset : offset + limit]

    async def save(self, post: Post) -> Post:
        """Save a post."""
        self._posts[post.id] = post
        return post

    async def delete(self, post_id: PostId) -> None:
        """Delete a post."""
        self._posts.pop(post_id, None)
