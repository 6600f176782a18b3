"""PostgreSQL implementation of AccessGrant repository."""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from forum.domain.model import AccessGrant
from forum.domain.repository import AccessRepository
from forum.domain.value import AccessLevel, ForumId, UserId
from forum.persistence.mappers import access_grant_to_dict, row_to_access_grant
from forum.persistence.tables import forum_access_table


class PostgresAccessRepository(AccessRepository):
    """PostgreSQL implementation of AccessRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find(self, user_id: UserId, forum_id: ForumId) -> Optional[AccessGrant]:
        """Find the direct grant of a user on a forum."""
        stmt = (
            select(forum_access_table)
            .where(forum_access_table.c.user_id == user_id)
            .where(forum_access_table.c.forum_id == forum_id)
        )
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_access_grant(dict(row)) if row else None

    async def find_by_forum(self, forum_id: ForumId) -> List[AccessGrant]:
        """Find all grants on a forum, oldest first."""
        stmt = (
            select(forum_access_table)
            .where(forum_access_table.c.forum_id == forum_id)
            .order_by(forum_access_table.c.granted_at)
        )
        result = await self.session.execute(stmt)
        return [row_to_access_grant(dict(row)) for row in result.mappings().all()]

    async def find_by_user(
        self, user_id: UserId, level: Optional[AccessLevel] = None
    ) -> List[AccessGrant]:
        """Find all grants held by a user."""
        stmt = select(forum_access_table).where(forum_access_table.c.user_id == user_id)
        if level is not None:
            stmt = stmt.where(forum_access_table.c.level == level.value)
        stmt = stmt.order_by(forum_access_table.c.granted_at)
        result = await self.session.execute(stmt)
        return [row_to_access_grant(dict(row)) for row in result.mappings().all()]

    async def count_admins(
        self, forum_id: ForumId, exclude_user_id: Optional[UserId] = None
    ) -> int:
        """Count ADMIN grants on a forum."""
        stmt = (
            select(func.count())
            .select_from(forum_access_table)
            .where(forum_access_table.c.forum_id == forum_id)
            .where(forum_access_table.c.level == AccessLevel.ADMIN.value)
        )
        if exclude_user_id is not None:
            stmt = stmt.where(forum_access_table.c.user_id != exclude_user_id)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def save(self, grant: AccessGrant) -> AccessGrant:
        """Insert a grant or update the level of the existing one.

        Keyed by (user_id, forum_id); the stored row keeps its original id
        and granted_at.
        """
        grant_dict = access_grant_to_dict(grant)
        stmt = (
            pg_insert(forum_access_table)
            .values(**grant_dict)
            .on_conflict_do_update(
                constraint="uq_forum_access_user_forum",
                set_={"level": grant_dict["level"], "updated_at": grant_dict["updated_at"]},
            )
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return await self.find(grant.user_id, grant.forum_id) or grant

    async def delete(self, user_id: UserId, forum_id: ForumId) -> bool:
        """Delete a grant, reporting whether one existed."""
        stmt = (
            forum_access_table.delete()
            .where(forum_access_table.c.user_id == user_id)
            .where(forum_access_table.c.forum_id == forum_id)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def delete_by_forum(self, forum_id: ForumId) -> int:
        """Delete every grant on a forum."""
        stmt = forum_access_table.delete().where(
            forum_access_table.c.forum_id == forum_id
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
