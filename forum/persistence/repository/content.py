"""PostgreSQL implementation of Content repository."""

from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.domain.model import Content
from forum.domain.repository import ContentRepository
from forum.domain.value import CommentId, ContentId, PostId
from forum.persistence.mappers import content_to_dict, row_to_content
from forum.persistence.tables import contents_table


class PostgresContentRepository(ContentRepository):
    """PostgreSQL implementation of ContentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, content_id: ContentId) -> Optional[Content]:
        """Find a content item by ID."""
        stmt = select(contents_table).where(contents_table.c.id == content_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_content(dict(row)) if row else None

    async def find_by_post(self, post_id: PostId) -> List[Content]:
        """Find content attached directly to a post."""
        stmt = (
            select(contents_table)
            .where(contents_table.c.post_id == post_id)
            .order_by(contents_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_content(dict(row)) for row in result.mappings().all()]

    async def find_by_comments(self, comment_ids: Sequence[CommentId]) -> List[Content]:
        """Find content attached to any of the given comments."""
        if not comment_ids:
            return []
        stmt = (
            select(contents_table)
            .where(contents_table.c.comment_id.in_(list(comment_ids)))
            .order_by(contents_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_content(dict(row)) for row in result.mappings().all()]

    async def save(self, content: Content) -> Content:
        """Save a content item (create or update)."""
        existing = await self.find_by_id(content.id)

        content_dict = content_to_dict(content)

        if existing:
            stmt = (
                contents_table.update()
                .where(contents_table.c.id == content.id)
                .values(**content_dict)
            )
        else:
            stmt = contents_table.insert().values(**content_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return content

    async def delete_many(self, content_ids: Sequence[ContentId]) -> int:
        """Delete content records."""
        if not content_ids:
            return 0
        stmt = contents_table.delete().where(contents_table.c.id.in_(list(content_ids)))
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
