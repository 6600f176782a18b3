"""Unit tests for PostService."""

from uuid import uuid4

import pytest

from forum.domain.error import AccessDeniedError, NotFoundError, ValidationError
from forum.domain.service import HierarchyManager, PostService
from forum.domain.value import AccessLevel, ForumId, PostId
from tests.conftest import make_post, make_user
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


async def _forum(env):
    manager = await env.get(HierarchyManager)
    owner = await make_user(env, "owner")
    writer = await make_user(env, "writer")
    reader = await make_user(env, "reader")
    forum = await manager.create_forum("Tech", None, owner.id)
    await manager.grant_access(forum.id, writer.id, AccessLevel.WRITE, owner.id)
    await manager.grant_access(forum.id, reader.id, AccessLevel.READ, owner.id)
    return forum, owner, writer, reader


class TestCreatePost:
    """Tests for create_post."""

    @pytest.mark.asyncio
    async def test_writer_creates_post(self, unit_env):
        """WRITE holders can post; the title is trimmed."""
        # Arrange
        service = await unit_env.get(PostService)
        forum, _, writer, _ = await _forum(unit_env)

        # Act
        post = await service.create_post(forum.id, "  Hello  ", "First!", writer.id)

        # Assert
        assert post.title == "Hello"
        assert post.author_id == writer.id
        assert post.forum_id == forum.id

    @pytest.mark.asyncio
    async def test_writer_on_parent_posts_in_subforum(self, unit_env):
        """WRITE inherited from the parent is enough."""
        # Arrange
        service = await unit_env.get(PostService)
        manager = await unit_env.get(HierarchyManager)
        forum, owner, writer, _ = await _forum(unit_env)
        sub = await manager.create_subforum("Gadgets", None, forum.id, owner.id)

        # Act
        post = await service.create_post(sub.id, "Phones", "Which one?", writer.id)

        # Assert
        assert post.forum_id == sub.id

    @pytest.mark.asyncio
    async def test_reader_cannot_post(self, unit_env):
        """READ does not imply WRITE."""
        service = await unit_env.get(PostService)
        forum, _, _, reader = await _forum(unit_env)

        with pytest.raises(AccessDeniedError):
            await service.create_post(forum.id, "Hi", "Body", reader.id)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,body", [("   ", "Body"), ("Title", "  "), ("x" * 301, "Body")])
    async def test_invalid_post_is_rejected(self, unit_env, title, body):
        """Blank fields and over-long titles fail validation."""
        service = await unit_env.get(PostService)
        forum, _, writer, _ = await _forum(unit_env)

        with pytest.raises(ValidationError):
            await service.create_post(forum.id, title, body, writer.id)

    @pytest.mark.asyncio
    async def test_missing_forum(self, unit_env):
        """Posting to an unknown forum is NotFound."""
        service = await unit_env.get(PostService)
        user = await make_user(unit_env, "someone")

        with pytest.raises(NotFoundError):
            await service.create_post(ForumId(uuid4()), "Hi", "Body", user.id)


class TestReadPosts:
    """Tests for get_post and list_posts."""

    @pytest.mark.asyncio
    async def test_list_newest_first_with_paging(self, unit_env):
        """Posts come back newest first and honour limit and offset."""
        # Arrange
        service = await unit_env.get(PostService)
        forum, _, writer, reader = await _forum(unit_env)
        first = await make_post(unit_env, forum.id, writer.id, "first")
        second = await make_post(unit_env, forum.id, writer.id, "second")
        third = await make_post(unit_env, forum.id, writer.id, "third")

        # Act
        everything = await service.list_posts(forum.id, reader.id)
        page = await service.list_posts(forum.id, reader.id, limit=1, offset=1)

        # Assert
        assert [p.id for p in everything] == [third.id, second.id, first.id]
        assert [p.id for p in page] == [second.id]

    @pytest.mark.asyncio
    async def test_outsider_cannot_read(self, unit_env):
        """Users without a grant on the chain are denied."""
        # Arrange
        service = await unit_env.get(PostService)
        forum, _, writer, _ = await _forum(unit_env)
        outsider = await make_user(unit_env, "outsider")
        post = await make_post(unit_env, forum.id, writer.id)

        # Act / Assert
        with pytest.raises(AccessDeniedError):
            await service.get_post(post.id, outsider.id)
        with pytest.raises(AccessDeniedError):
            await service.list_posts(forum.id, outsider.id)

    @pytest.mark.asyncio
    async def test_missing_post(self, unit_env):
        """Unknown posts are NotFound."""
        service = await unit_env.get(PostService)
        user = await make_user(unit_env, "someone")

        with pytest.raises(NotFoundError):
            await service.get_post(PostId(uuid4()), user.id)


class TestUpdatePost:
    """Tests for update_post."""

    @pytest.mark.asyncio
    async def test_author_edits_body(self, unit_env):
        """Only the supplied field changes."""
        # Arrange
        service = await unit_env.get(PostService)
        forum, _, writer, _ = await _forum(unit_env)
        post = await make_post(unit_env, forum.id, writer.id, "Title")

        # Act
        updated = await service.update_post(post.id, writer.id, body="Edited")

        # Assert
        assert updated.title == "Title"
        assert updated.body == "Edited"
        assert updated.updated_at > post.updated_at

    @pytest.mark.asyncio
    async def test_admin_edits_others_post(self, unit_env):
        """Admins moderate posts."""
        # Arrange
        service = await unit_env.get(PostService)
        forum, owner, writer, _ = await _forum(unit_env)
        post = await make_post(unit_env, forum.id, writer.id)

        # Act
        updated = await service.update_post(post.id, owner.id, title="Moderated")

        # Assert
        assert updated.title == "Moderated"

    @pytest.mark.asyncio
    async def test_other_writer_cannot_edit(self, unit_env):
        """WRITE alone does not allow editing someone else's post."""
        # Arrange
        service = await unit_env.get(PostService)
        manager = await unit_env.get(HierarchyManager)
        forum, owner, writer, _ = await _forum(unit_env)
        other = await make_user(unit_env, "other")
        await manager.grant_access(forum.id, other.id, AccessLevel.WRITE, owner.id)
        post = await make_post(unit_env, forum.id, writer.id)

        # Act / Assert
        with pytest.raises(AccessDeniedError):
            await service.update_post(post.id, other.id, body="Mine now")
