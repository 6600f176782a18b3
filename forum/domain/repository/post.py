"""Post repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from forum.domain.model.post import Post
from forum.domain.value import ForumId, PostId


class PostRepository(ABC):
    """Repository for Post entity."""

    @abstractmethod
    async def find_by_id(self, post_id: PostId) -> Optional[Post]:
        """Find a post by ID.

        Args:
            post_id: The post's unique identifier

        Returns:
            The post if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_forum(
        self,
        forum_id: ForumId,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Post]:
        """Find posts in a forum, newest first.

        Args:
            forum_id: Forum ID
            limit: Maximum number of posts to return (None for all)
            offset: Number of posts to skip

        Returns:
            List of posts
        """
        pass

    @abstractmethod
    async def save(self, post: Post) -> Post:
        """Save a post (create or update)."""
        pass

    @abstractmethod
    async def delete(self, post_id: PostId) -> None:
        """Delete a post record (hard delete)."""
        pass
