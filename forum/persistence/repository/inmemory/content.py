"""In-memory content repository for testing."""

from typing import Optional, Sequence

from forum.domain.model.content import Content
from forum.domain.repository.content import ContentRepository
from forum.domain.value import CommentId, ContentId, PostId


class InMemoryContentRepository(ContentRepository):
    """In-memory implementation of ContentRepository for testing."""

    def __init__(self) -> None:
        self._contents: dict[ContentId, Content] = {}

    async def find_by_id(self, content_id: ContentId) -> Optional[Content]:
        """Find a content item by ID."""
        return self._contents.get(content_id)

    async def find_by_post(self, post_id: PostId) -> list[Content]:
        """Find content attached directly to a post."""
        return [c for c in self._contents.values() if c.post_id == post_id]

    async def find_by_comments(self, comment_ids: Sequence[CommentId]) -> list[Content]:
        """Find content attached to any of the given comments."""
        wanted = set(comment_ids)
        return [c for c in self._contents.values() if c.comment_id in wanted]

    async def save(self, content: Content) -> Content:
        """Save a content item."""
        self._contents[content.id] = content
        return content

    async def delete_many(self, content_ids: Sequence[ContentId]) -> int:
        """Delete content records."""
        removed = 0
        for content_id in content_ids:
            if self._contents.pop(content_id, None) is not None:
                removed += 1
        return removed
