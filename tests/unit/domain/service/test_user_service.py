"""Unit tests for UserService."""

from uuid import uuid4

import pytest

from forum.domain.error import DuplicateResourceError, NotFoundError, ValidationError
from forum.domain.service import AccessResolver, HierarchyManager, UserService
from forum.domain.value import AccessLevel, UserId
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestCreateUser:
    """Tests for create_user."""

    @pytest.mark.asyncio
    async def test_create_user(self, unit_env):
        """New users are active and default their display name."""
        # Arrange
        service = await unit_env.get(UserService)

        # Act
        user = await service.create_user("alice", email="alice@example.com")

        # Assert
        assert user.active
        assert user.display_name == "alice"
        assert await service.exists(user.id)
        assert await service.is_active(user.id)

    @pytest.mark.asyncio
    async def test_duplicate_username(self, unit_env):
        """Usernames are unique."""
        service = await unit_env.get(UserService)
        await service.create_user("alice")

        with pytest.raises(DuplicateResourceError):
            await service.create_user("alice")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("username", ["al", "has space", "x" * 51])
    async def test_invalid_username(self, unit_env, username):
        """Malformed usernames fail validation."""
        service = await unit_env.get(UserService)

        with pytest.raises(ValidationError):
            await service.create_user(username)


class TestLookup:
    """Tests for get_user_by_id, exists and is_active."""

    @pytest.mark.asyncio
    async def test_unknown_user(self, unit_env):
        """Unknown users do not exist and are not active."""
        # Arrange
        service = await unit_env.get(UserService)
        user_id = UserId(uuid4())

        # Act / Assert
        assert not await service.exists(user_id)
        assert not await service.is_active(user_id)
        with pytest.raises(NotFoundError):
            await service.get_user_by_id(user_id)


class TestDeactivateUser:
    """Tests for deactivate_user."""

    @pytest.mark.asyncio
    async def test_deactivated_user_loses_access(self, unit_env):
        """Grants stay in place but no longer resolve."""
        # Arrange
        service = await unit_env.get(UserService)
        manager = await unit_env.get(HierarchyManager)
        resolver = await unit_env.get(AccessResolver)
        owner = await service.create_user("owner")
        member = await service.create_user("member")
        forum = await manager.create_forum("Tech", None, owner.id)
        await manager.grant_access(forum.id, member.id, AccessLevel.WRITE, owner.id)

        # Act
        deactivated = await service.deactivate_user(member.id)

        # Assert
        assert not deactivated.active
        assert await service.exists(member.id)
        assert not await service.is_active(member.id)
        assert not await resolver.has_access(forum.id, member.id, AccessLevel.READ)

    @pytest.mark.asyncio
    async def test_deactivate_twice_is_harmless(self, unit_env):
        """A second deactivation returns the user unchanged."""
        # Arrange
        service = await unit_env.get(UserService)
        user = await service.create_user("member")
        first = await service.deactivate_user(user.id)

        # Act
        second = await service.deactivate_user(user.id)

        # Assert
        assert second == first
