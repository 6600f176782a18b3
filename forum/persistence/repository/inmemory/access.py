"""In-memory access grant repository for testing."""

from typing import Optional

from forum.domain.model.access import AccessGrant
from forum.domain.repository.access import AccessRepository
from forum.domain.value import AccessLevel, ForumId, UserId


class InMemoryAccessRepository(AccessRepository):
    """In-memory implementation of AccessRepository for testing.

    Grants are keyed by (user_id, forum_id), mirroring the unique
    constraint of the real table.
    """

    def __init__(self) -> None:
        self._grants: dict[tuple[UserId, ForumId], AccessGrant] = {}

    async def find(self, user_id: UserId, forum_id: ForumId) -> Optional[AccessGrant]:
        """Find the direct grant of a user on a forum."""
        return self._grants.get((user_id, forum_id))

    async def find_by_forum(self, forum_id: ForumId) -> list[AccessGrant]:
        """Find all grants on a forum, oldest first."""
        grants = [g for g in self._grants.values() if g.forum_id == forum_id]
        grants.sort(key=lambda g: g.granted_at)
        return grants

    async def find_by_user(
        self, user_id: UserId, level: Optional[AccessLevel] = None
    ) -> list[AccessGrant]:
        """Find all grants held by a user."""
        grants = [
            g
            for g in self._grants.values()
            if g.user_id == user_id and (level is None or g.level == level)
        ]
        grants.sort(key=lambda g: g.granted_at)
        return grants

    async def count_admins(
        self, forum_id: ForumId, exclude_user_id: Optional[UserId] = None
    ) -> int:
        """Count ADMIN grants on a forum."""
        return sum(
            1
            for g in self._grants.values()
            if g.forum_id == forum_id and g.is_admin and g.user_id != exclude_user_id
        )

    async def save(self, grant: AccessGrant) -> AccessGrant:
        """Insert a grant or update the level of the existing one."""
        key = (grant.user_id, grant.forum_id)
        existing = self._grants.get(key)
        if existing is not None:
            grant = existing.model_copy(
                update={"level": grant.level, "updated_at": grant.updated_at}
            )
        self._grants[key] = grant
        return grant

    async def delete(self, user_id: UserId, forum_id: ForumId) -> bool:
        """Delete a grant, reporting whether one existed."""
        return self._grants.pop((user_id, forum_id), None) is not None

    async def delete_by_forum(self, forum_id: ForumId) -> int:
        """Delete every grant on a forum."""
        keys = [key for key, g in self._grants.items() if g.forum_id == forum_id]
        for key in keys:
            del self._grants[key]
        return len(keys)
