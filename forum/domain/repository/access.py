"""Access grant repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from forum.domain.model.access import AccessGrant
from forum.domain.value import AccessLevel, ForumId, UserId


class AccessRepository(ABC):
    """Repository for AccessGrant entity.

    A (user, forum) pair maps to at most one grant.
    """

    @abstractmethod
    async def find(self, user_id: UserId, forum_id: ForumId) -> Optional[AccessGrant]:
        """Find the direct grant of a user on a forum.

        Args:
            user_id: Grantee
            forum_id: Forum

        Returns:
            The grant if present, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_forum(self, forum_id: ForumId) -> List[AccessGrant]:
        """Find all grants on a forum."""
        pass

    @abstractmethod
    async def find_by_user(
        self, user_id: UserId, level: Optional[AccessLevel] = None
    ) -> List[AccessGrant]:
        """Find all grants held by a user, optionally of one level only."""
        pass

    @abstractmethod
    async def count_admins(
        self, forum_id: ForumId, exclude_user_id: Optional[UserId] = None
    ) -> int:
        """Count ADMIN grants on a forum.

        Args:
            forum_id: Forum
            exclude_user_id: Grantee whose grant is left out of the count

        Returns:
            Number of ADMIN grants
        """
        pass

    @abstractmethod
    async def save(self, grant: AccessGrant) -> AccessGrant:
        """Insert or update a grant, keyed by (user_id, forum_id)."""
        pass

    @abstractmethod
    async def delete(self, user_id: UserId, forum_id: ForumId) -> bool:
        """Delete a grant.

        Returns:
            True if a grant was removed, False if none existed
        """
        pass

    @abstractmethod
    async def delete_by_forum(self, forum_id: ForumId) -> int:
        """Delete every grant on a forum, returning how many were removed."""
        pass
