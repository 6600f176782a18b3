"""In-memory comment repository for testing."""

from typing import Optional, Sequence

from forum.domain.model.comment import Comment
from forum.domain.repository.comment import CommentRepository
from forum.domain.value import CommentId, PostId


class InMemoryCommentRepository(CommentRepository):
    """In-memory implementation of CommentRepository for testing."""

    def __init__(self) -> None:
        self._comments: dict[CommentId, Comment] = {}

    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID."""
        return self._comments.get(comment_id)

    async def find_by_post(
        self, post_id: PostId, top_level_only: bool = False
    ) -> list[Comment]:
        """Find comments of a post, oldest first."""
        comments = [c for c in self._comments.values() if c.post_id == post_id]
        if top_level_only:
            comments = [c for c in comments if c.parent_id is None]
        comments.sort(key=lambda c: c.created_at)
        return comments

    async def find_children(self, parent_ids: Sequence[CommentId]) -> list[Comment]:
        """Find direct replies of any of the given comments, oldest first."""
        wanted = set(parent_ids)
        comments = [c for c in self._comments.values() if c.parent_id in wanted]
        comments.sort(key=lambda c: c.created_at)
        return comments

    async def save(self, comment: Comment) -> Comment:
        """Save a comment."""
        self._comments[comment.id] = comment
        return comment

    async def delete_many(self, comment_ids: Sequence[CommentId]) -> int:
        """Delete comments."""
        removed = 0
        for comment_id in comment_ids:
            if self._comments.pop(comment_id, None) is not None:
                removed += 1
        return removed
