"""PostgreSQL implementation of Comment repository."""

from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.domain.model import Comment
from forum.domain.repository import CommentRepository
from forum.domain.value import CommentId, PostId
from forum.persistence.mappers import comment_to_dict, row_to_comment
from forum.persistence.tables import comments_table


class PostgresCommentRepository(CommentRepository):
    """PostgreSQL implementation of CommentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID."""
        stmt = select(comments_table).where(comments_table.c.id == comment_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_comment(dict(row)) if row else None

    async def find_by_post(
        self, post_id: PostId, top_level_only: bool = False
    ) -> List[Comment]:
        """Find comments of a post, oldest first."""
        stmt = select(comments_table).where(comments_table.c.post_id == post_id)
        if top_level_only:
            stmt = stmt.where(comments_table.c.parent_id.is_(None))
        stmt = stmt.order_by(comments_table.c.created_at)

        result = await self.session.execute(stmt)
        return [row_to_comment(dict(row)) for row in result.mappings().all()]

    async def find_children(self, parent_ids: Sequence[CommentId]) -> List[Comment]:
        """Find direct replies of any of the given comments, oldest first."""
        if not parent_ids:
            return []
        stmt = (
            select(comments_table)
            .where(comments_table.c.parent_id.in_(list(parent_ids)))
            .order_by(comments_table.c.created_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_comment(dict(row)) for row in result.mappings().all()]

    async def save(self, comment: Comment) -> Comment:
        """Save a comment (create or update)."""
        existing = await self.find_by_id(comment.id)

        comment_dict = comment_to_dict(comment)

        if existing:
            stmt = (
                comments_table.update()
                .where(comments_table.c.id == comment.id)
                .values(**comment_dict)
            )
        else:
            stmt = comments_table.insert().values(**comment_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return comment

    async def delete_many(self, comment_ids: Sequence[CommentId]) -> int:
        """Delete comments (hard delete), replies before parents.

        Rows are removed one statement each in the given order so the
        self-referencing foreign key is never violated.
        """
        removed = 0
        for comment_id in comment_ids:
            stmt = comments_table.delete().where(comments_table.c.id == comment_id)
            result = await self.session.execute(stmt)
            removed += result.rowcount
        await self.session.flush()
        return removed
