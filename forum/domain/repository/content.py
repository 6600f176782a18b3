"""Content repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from forum.domain.model.content import Content
from forum.domain.value import CommentId, ContentId, PostId


class ContentRepository(ABC):
    """Repository for Content entity."""

    @abstractmethod
    async def find_by_id(self, content_id: ContentId) -> Optional[Content]:
        """Find a content item by ID.

        Args:
            content_id: The content's unique identifier

        Returns:
            The content if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_post(self, post_id: PostId) -> List[Content]:
        """Find content attached directly to a post."""
        pass

    @abstractmethod
    async def find_by_comments(self, comment_ids: Sequence[CommentId]) -> List[Content]:
        """Find content attached to any of the given comments."""
        pass

    @abstractmethod
    async def save(self, content: Content) -> Content:
        """Save a content item (create or update)."""
        pass

    @abstractmethod
    async def delete_many(self, content_ids: Sequence[ContentId]) -> int:
        """Delete content records, returning how many were removed."""
        pass
