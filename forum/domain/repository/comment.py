"""Comment repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from forum.domain.model.comment import Comment
from forum.domain.value import CommentId, PostId


class CommentRepository(ABC):
    """Repository for Comment entity."""

    @abstractmethod
    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID.

        Args:
            comment_id: The comment's unique identifier

        Returns:
            The comment if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_post(
        self, post_id: PostId, top_level_only: bool = False
    ) -> List[Comment]:
        """Find comments of a post, oldest first.

        Args:
            post_id: The post ID
            top_level_only: Only return comments without a parent

        Returns:
            List of comments
        """
        pass

    @abstractmethod
    async def find_children(self, parent_ids: Sequence[CommentId]) -> List[Comment]:
        """Find the direct replies of any of the given comments, oldest first.

        Taking several parents at once lets callers walk a reply tree one
        level per query.
        """
        pass

    @abstractmethod
    async def save(self, comment: Comment) -> Comment:
        """Save a comment (create or update)."""
        pass

    @abstractmethod
    async def delete_many(self, comment_ids: Sequence[CommentId]) -> int:
        """Delete comment records (hard delete), returning how many were removed.

        Callers pass replies before their parents.
        """
        pass
