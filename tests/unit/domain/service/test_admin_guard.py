"""Unit tests for AdminGuard and the last-admin rule."""

import asyncio
from typing import Optional
from uuid import uuid4

import pytest

from forum.adapter.storage.memory import MockContentStore
from forum.config import HierarchySettings
from forum.domain.error import AccessDeniedError, LastAdminError
from forum.domain.model import AccessGrant
from forum.domain.service import (
    AccessResolver,
    AdminGuard,
    CascadeCoordinator,
    ForumLockRegistry,
    HierarchyManager,
    UserService,
)
from forum.domain.value import AccessGrantId, AccessLevel, ForumId, UserId
from forum.persistence.repository.inmemory import (
    InMemoryAccessRepository,
    InMemoryCommentRepository,
    InMemoryContentRepository,
    InMemoryForumRepository,
    InMemoryPostRepository,
    InMemoryUserRepository,
)
from tests.conftest import make_user
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()


class TestCanRevokeOrDowngrade:
    """Tests for can_revoke_or_downgrade."""

    @pytest.mark.asyncio
    async def test_sole_admin_cannot_be_removed(self, unit_env):
        """Removing or downgrading the only ADMIN grant is refused."""
        # Arrange
        manager = await unit_env.get(HierarchyManager)
        guard = await unit_env.get(AdminGuard)
        owner = await make_user(unit_env, "owner")
        forum = await manager.create_forum("Tech", None, owner.id)

        # Act / Assert
        assert not await guard.can_revoke_or_downgrade(forum.id, owner.id, None)
        assert not await guard.can_revoke_or_downgrade(
            forum.id, owner.id, AccessLevel.WRITE
        )
        assert await guard.can_revoke_or_downgrade(forum.id, owner.id, AccessLevel.ADMIN)

    @pytest.mark.asyncio
    async def test_non_admin_grants_are_always_changeable(self, unit_env):
        """Only ADMIN grants are guarded."""
        # Arrange
        manager = await unit_env.get(HierarchyManager)
        guard = await unit_env.get(AdminGuard)
        owner = await make_user(unit_env, "owner")
        reader = await make_user(unit_env, "reader")
        forum = await manager.create_forum("Tech", None, owner.id)
        await manager.grant_access(forum.id, reader.id, AccessLevel.READ, owner.id)

        # Act / Assert
        assert await guard.can_revoke_or_downgrade(forum.id, reader.id, None)

    @pytest.mark.asyncio
    async def test_second_admin_unblocks_removal(self, unit_env):
        """With another ADMIN present, the first may be removed."""
        # Arrange
        manager = await unit_env.get(HierarchyManager)
        guard = await unit_env.get(AdminGuard)
        owner = await make_user(unit_env, "owner")
        deputy = await make_user(unit_env, "deputy")
        forum = await manager.create_forum("Tech", None, owner.id)
        await manager.grant_access(forum.id, deputy.id, AccessLevel.ADMIN, owner.id)

        # Act / Assert
        assert await guard.can_revoke_or_downgrade(forum.id, owner.id, None)

    @pytest.mark.asyncio
    async def test_ensure_raises_last_admin_error(self, unit_env):
        """ensure_can_revoke_or_downgrade raises the Conflict error."""
        # Arrange
        manager = await unit_env.get(HierarchyManager)
        guard = await unit_env.get(AdminGuard)
        owner = await make_user(unit_env, "owner")
        forum = await manager.create_forum("Tech", None, owner.id)

        # Act / Assert
        with pytest.raises(LastAdminError):
            await guard.ensure_can_revoke_or_downgrade(forum.id, owner.id, None)


class _YieldingAccessRepository(InMemoryAccessRepository):
    """Gives up the event loop while counting, widening the race window."""

    async def count_admins(
        self, forum_id: ForumId, exclude_user_id: Optional[UserId] = None
    ) -> int:
        count = await super().count_admins(forum_id, exclude_user_id)
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        return count


class _YieldingFindAccessRepository(InMemoryAccessRepository):
    """Gives up the event loop on every grant lookup."""

    async def find(self, user_id: UserId, forum_id: ForumId) -> Optional[AccessGrant]:
        await asyncio.sleep(0)
        return await super().find(user_id, forum_id)


def _build_manager(access_repo: InMemoryAccessRepository):
    forum_repo = InMemoryForumRepository()
    settings = HierarchySettings()
    locks = ForumLockRegistry()
    users = UserService(InMemoryUserRepository())
    resolver = AccessResolver(forum_repo, access_repo, users, settings)
    guard = AdminGuard(access_repo, forum_repo, locks)
    cascade = CascadeCoordinator(
        InMemoryPostRepository(),
        InMemoryCommentRepository(),
        InMemoryContentRepository(),
        MockContentStore(),
        resolver,
    )
    manager = HierarchyManager(
        forum_repo, access_repo, users, resolver, guard, cascade, locks, settings
    )
    return users, manager


class TestConcurrentRevocation:
    """The count-then-delete sequence must not interleave."""

    @pytest.mark.asyncio
    async def test_concurrent_revocations_keep_one_admin(self):
        """Revoking the last two ADMIN grants at once leaves exactly one."""
        # Arrange
        user_repo = InMemoryUserRepository()
        forum_repo = InMemoryForumRepository()
        access_repo = _YieldingAccessRepository()
        settings = HierarchySettings()
        locks = ForumLockRegistry()

        users = UserService(user_repo)
        resolver = AccessResolver(forum_repo, access_repo, users, settings)
        guard = AdminGuard(access_repo, forum_repo, locks)
        cascade = CascadeCoordinator(
            InMemoryPostRepository(),
            InMemoryCommentRepository(),
            InMemoryContentRepository(),
            MockContentStore(),
            resolver,
        )
        manager = HierarchyManager(
            forum_repo, access_repo, users, resolver, guard, cascade, locks, settings
        )

        # An admin of the parent manages the child's grants by inheritance
        overseer = await users.create_user("overseer")
        alice = await users.create_user("alice")
        bob = await users.create_user("bob")
        parent = await manager.create_forum("Parent", None, overseer.id)
        child = await manager.create_subforum("Child", None, parent.id, overseer.id)
        await manager.grant_access(child.id, alice.id, AccessLevel.ADMIN, overseer.id)
        await manager.grant_access(child.id, bob.id, AccessLevel.ADMIN, overseer.id)
        await manager.revoke_access(child.id, overseer.id, overseer.id)
        assert await access_repo.count_admins(child.id) == 2

        # Act
        results = await asyncio.gather(
            manager.revoke_access(child.id, alice.id, overseer.id),
            manager.revoke_access(child.id, bob.id, overseer.id),
            return_exceptions=True,
        )

        # Assert
        successes = [r for r in results if r is True]
        failures = [r for r in results if isinstance(r, LastAdminError)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert await access_repo.count_admins(child.id) == 1

    @pytest.mark.asyncio
    async def test_admin_revoked_while_waiting_loses_authority(self):
        """A grant change re-checks the actor's ADMIN once it holds the forum lock."""
        # Arrange
        access_repo = _YieldingFindAccessRepository()
        users, manager = _build_manager(access_repo)
        alice = await users.create_user("alice")
        bob = await users.create_user("bob")
        carol = await users.create_user("carol")
        forum = await manager.create_forum("Tech", None, alice.id)
        await manager.grant_access(forum.id, bob.id, AccessLevel.ADMIN, alice.id)
        await manager.grant_access(forum.id, carol.id, AccessLevel.ADMIN, alice.id)

        # Act
        results = await asyncio.gather(
            manager.revoke_access(forum.id, bob.id, alice.id),
            manager.revoke_access(forum.id, carol.id, bob.id),
            return_exceptions=True,
        )

        # Assert
        assert results[0] is True
        assert isinstance(results[1], AccessDeniedError)
        assert await access_repo.find(carol.id, forum.id) is not None
        assert await access_repo.count_admins(forum.id) == 2

    @pytest.mark.asyncio
    async def test_without_exclusive_lock_race_is_observable(self):
        """Sanity check: the yielding repository really interleaves unguarded callers."""
        # Arrange
        access_repo = _YieldingAccessRepository()
        user_repo = InMemoryUserRepository()
        users = UserService(user_repo)
        alice = await users.create_user("alice")
        bob = await users.create_user("bob")
        forum_id = ForumId(uuid4())

        for user in (alice, bob):
            await access_repo.save(
                AccessGrant(
                    id=AccessGrantId(uuid4()),
                    user_id=user.id,
                    forum_id=forum_id,
                    level=AccessLevel.ADMIN,
                )
            )

        async def unguarded_revoke(user_id: UserId) -> None:
            remaining = await access_repo.count_admins(forum_id, exclude_user_id=user_id)
            if remaining > 0:
                await access_repo.delete(user_id, forum_id)

        # Act
        await asyncio.gather(unguarded_revoke(alice.id), unguarded_revoke(bob.id))

        # Assert
        assert await access_repo.count_admins(forum_id) == 0
