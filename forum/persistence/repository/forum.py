"""PostgreSQL implementation of Forum repository."""

from typing import List, Optional

from sqlalchemy import exists, func, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession

from forum.domain.model import Forum
from forum.domain.repository import ForumRepository
from forum.domain.value import ForumId
from forum.persistence.mappers import forum_to_dict, row_to_forum
from forum.persistence.tables import forums_table

# Key of the transaction-level advisory lock serializing tree changes
FORUM_TREE_LOCK_KEY = 0x666F72756D  # "forum"


class PostgresForumRepository(ForumRepository):
    """PostgreSQL implementation of ForumRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def find_by_id(self, forum_id: ForumId) -> Optional[Forum]:
        """Find a forum by ID."""
        stmt = select(forums_table).where(forums_table.c.id == forum_id)
        result = await self.session.execute(stmt)
        row = result.mappings().first()
        return row_to_forum(dict(row)) if row else None

    async def find_lineage(self, forum_id: ForumId, limit: int) -> List[Forum]:
        """Read the ancestor chain with a single recursive query."""
        start = (
            select(*forums_table.c, literal_column("1").label("position"))
            .where(forums_table.c.id == forum_id)
            .cte("lineage", recursive=True)
        )
        parent = forums_table.alias("parent")
        lineage = start.union_all(
            select(*parent.c, (start.c.position + 1).label("position"))
            .where(parent.c.id == start.c.parent_id)
            .where(start.c.position < limit)
        )
        stmt = select(*[lineage.c[col.name] for col in forums_table.c]).order_by(
            lineage.c.position
        )
        result = await self.session.execute(stmt)
        return [row_to_forum(dict(row)) for row in result.mappings().all()]

    async def exists(self, forum_id: ForumId) -> bool:
        """Check whether a forum exists."""
        stmt = select(exists().where(forums_table.c.id == forum_id))
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def find_roots(self) -> List[Forum]:
        """Find all root forums, ordered by name."""
        stmt = (
            select(forums_table)
            .where(forums_table.c.parent_id.is_(None))
            .order_by(func.lower(forums_table.c.name))
        )
        result = await self.session.execute(stmt)
        return [row_to_forum(dict(row)) for row in result.mappings().all()]

    async def find_children(self, parent_id: ForumId) -> List[Forum]:
        """Find the direct children of a forum, ordered by name."""
        stmt = (
            select(forums_table)
            .where(forums_table.c.parent_id == parent_id)
            .order_by(func.lower(forums_table.c.name))
        )
        result = await self.session.execute(stmt)
        return [row_to_forum(dict(row)) for row in result.mappings().all()]

    async def has_children(self, forum_id: ForumId) -> bool:
        """Check whether a forum has at least one child."""
        stmt = select(exists().where(forums_table.c.parent_id == forum_id))
        result = await self.session.execute(stmt)
        return bool(result.scalar())

    async def find_sibling_by_name(
        self,
        parent_id: Optional[ForumId],
        name: str,
        exclude_id: Optional[ForumId] = None,
    ) -> Optional[Forum]:
        """Find a forum by name (case-insensitive) among a parent's children."""
        stmt = select(forums_table).where(
            func.lower(forums_table.c.name) == name.strip().lower()
        )
        if parent_id is None:
            stmt = stmt.where(forums_table.c.parent_id.is_(None))
        else:
            stmt = stmt.where(forums_table.c.parent_id == parent_id)
        if exclude_id is not None:
            stmt = stmt.where(forums_table.c.id != exclude_id)

        result = await self.session.execute(stmt.limit(1))
        row = result.mappings().first()
        return row_to_forum(dict(row)) if row else None

    async def search_by_name(self, term: str) -> List[Forum]:
        """Find forums whose name contains ``term`` (case-insensitive)."""
        stmt = (
            select(forums_table)
            .where(forums_table.c.name.icontains(term, autoescape=True))
            .order_by(func.lower(forums_table.c.name))
        )
        result = await self.session.execute(stmt)
        return [row_to_forum(dict(row)) for row in result.mappings().all()]

    async def save(self, forum: Forum) -> Forum:
        """Save a forum (create or update)."""
        existing = await self.find_by_id(forum.id)

        forum_dict = forum_to_dict(forum)

        if existing:
            stmt = (
                forums_table.update()
                .where(forums_table.c.id == forum.id)
                .values(**forum_dict)
            )
        else:
            stmt = forums_table.insert().values(**forum_dict)
        await self.session.execute(stmt)

        await self.session.flush()
        return forum

    async def delete(self, forum_id: ForumId) -> None:
        """Delete a forum record."""
        stmt = forums_table.delete().where(forums_table.c.id == forum_id)
        await self.session.execute(stmt)
        await self.session.flush()

    async def lock(self, forum_id: ForumId) -> None:
        """Lock the forum row until the transaction ends (SELECT ... FOR UPDATE)."""
        stmt = (
            select(forums_table.c.id)
            .where(forums_table.c.id == forum_id)
            .with_for_update()
        )
        await self.session.execute(stmt)

    async def lock_tree(self) -> None:
        """Take the transaction-level advisory lock guarding the tree shape."""
        await self.session.execute(select(func.pg_advisory_xact_lock(FORUM_TREE_LOCK_KEY)))
