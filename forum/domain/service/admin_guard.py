"""Guard for the at-least-one-administrator rule."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import logfire

from forum.domain.error import LastAdminError
from forum.domain.repository import AccessRepository, ForumRepository
from forum.domain.value import AccessLevel, ForumId, UserId

from .base import Service
from .locks import ForumLockRegistry


class AdminGuard(Service):
    """Keeps every forum with grants holding at least one ADMIN grant.

    The count of remaining admins and the grant change that follows are a
    check-then-act pair. Callers run both inside ``exclusive(forum_id)`` so
    two concurrent revocations cannot each see the other's admin and leave
    the forum with none.
    """

    def __init__(
        self,
        access_repository: AccessRepository,
        forum_repository: ForumRepository,
        lock_registry: ForumLockRegistry,
    ) -> None:
        """Initialize admin guard.

        Args:
            access_repository: Access grant repository
            forum_repository: Forum repository (store-level locking)
            lock_registry: Process-wide lock registry
        """
        self.access_repository = access_repository
        self.forum_repository = forum_repository
        self.lock_registry = lock_registry

    @asynccontextmanager
    async def exclusive(self, forum_id: ForumId) -> AsyncIterator[None]:
        """Hold the in-process and store-level lock of a forum.

        The asyncio lock is released when the block exits; the store lock
        lasts until the surrounding transaction commits or rolls back.
        """
        async with self.lock_registry.for_forum(forum_id):
            await self.forum_repository.lock(forum_id)
            yield

    async def can_revoke_or_downgrade(
        self,
        forum_id: ForumId,
        target_user_id: UserId,
        new_level: AccessLevel | None,
    ) -> bool:
        """Check whether a grant may be removed or changed.

        Args:
            forum_id: Forum whose grant changes
            target_user_id: Holder of the grant
            new_level: Replacement level, None for removal

        Returns:
            False only when the target holds the last ADMIN grant and would
            lose it
        """
        grant = await self.access_repository.find(target_user_id, forum_id)
        if grant is None or not grant.is_admin:
            return True
        if new_level == AccessLevel.ADMIN:
            return True

        remaining = await self.access_repository.count_admins(
            forum_id, exclude_user_id=target_user_id
        )
        return remaining > 0

    async def ensure_can_revoke_or_downgrade(
        self,
        forum_id: ForumId,
        target_user_id: UserId,
        new_level: AccessLevel | None,
    ) -> None:
        """Raise LastAdminError if the change would leave no administrator."""
        if not await self.can_revoke_or_downgrade(forum_id, target_user_id, new_level):
            logfire.warn(
                "Refused to remove last administrator",
                forum_id=str(forum_id),
                target_user_id=str(target_user_id),
                new_level=new_level.value if new_level else None,
            )
            raise LastAdminError(str(forum_id))
