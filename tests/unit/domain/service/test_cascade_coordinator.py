"""Unit tests for CascadeCoordinator."""

from uuid import uuid4

import pytest

from forum.domain.error import AccessDeniedError, NotFoundError
from forum.domain.repository import CommentRepository, ContentRepository, PostRepository
from forum.domain.service import (
    CascadeCoordinator,
    CommentService,
    ContentService,
    ContentStore,
    HierarchyManager,
)
from forum.domain.value import AccessLevel, CommentId, ContentId, ContentType, PostId
from tests.conftest import make_comment, make_post, make_user
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()


async def _forum_with_members(env):
    """Forum owned by ``owner`` with ``alice`` and ``bob`` as writers."""
    manager = await env.get(HierarchyManager)
    owner = await make_user(env, "owner")
    alice = await make_user(env, "alice")
    bob = await make_user(env, "bob")
    forum = await manager.create_forum("General", None, owner.id)
    for member in (alice, bob):
        await manager.grant_access(forum.id, member.id, AccessLevel.WRITE, owner.id)
    return forum, owner, alice, bob


class TestDeleteComment:
    """Tests for delete_comment."""

    @pytest.mark.asyncio
    async def test_thread_and_contents_are_removed(self, unit_env):
        """C1 <- C2 <- C3 and C1 <- C4, each with a file: all four go."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        contents = await unit_env.get(ContentService)
        comments = await unit_env.get(CommentService)
        forum, owner, alice, _ = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, owner.id)
        c1 = await make_comment(unit_env, post.id, alice.id)
        c2 = await make_comment(unit_env, post.id, alice.id, parent_id=c1.id)
        c3 = await make_comment(unit_env, post.id, alice.id, parent_id=c2.id)
        c4 = await make_comment(unit_env, post.id, alice.id, parent_id=c1.id)
        items = [
            await contents.add_comment_content(
                c.id, "photo.png", b"png", ContentType.IMAGE, alice.id
            )
            for c in (c1, c2, c3, c4)
        ]

        # Act
        removed = await cascade.delete_comment(c1.id, alice.id)

        # Assert
        assert removed == 4
        for c in (c1, c2, c3, c4):
            with pytest.raises(NotFoundError):
                await comments.get_comment(c.id, owner.id)
        for item in items:
            with pytest.raises(NotFoundError):
                await contents.fetch_content_data(item.id, owner.id)

    @pytest.mark.asyncio
    async def test_reply_by_someone_else_blocks_the_author(self, unit_env):
        """Alice cannot take Bob's reply down with her comment."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        comment_repo = await unit_env.get(CommentRepository)
        forum, owner, alice, bob = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, owner.id)
        c1 = await make_comment(unit_env, post.id, alice.id)
        c2 = await make_comment(unit_env, post.id, alice.id, parent_id=c1.id)
        c3 = await make_comment(unit_env, post.id, bob.id, parent_id=c2.id)

        # Act / Assert
        with pytest.raises(AccessDeniedError):
            await cascade.delete_comment(c1.id, alice.id)

        for c in (c1, c2, c3):
            assert await comment_repo.find_by_id(c.id) is not None

    @pytest.mark.asyncio
    async def test_post_author_can_delete_any_thread(self, unit_env):
        """The post's author moderates its comments."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        forum, _, alice, bob = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, alice.id)
        c1 = await make_comment(unit_env, post.id, bob.id)
        await make_comment(unit_env, post.id, bob.id, parent_id=c1.id)

        # Act
        removed = await cascade.delete_comment(c1.id, alice.id)

        # Assert
        assert removed == 2

    @pytest.mark.asyncio
    async def test_forum_admin_can_delete_any_thread(self, unit_env):
        """Admins moderate every comment in the forum."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        forum, owner, alice, bob = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, alice.id)
        c1 = await make_comment(unit_env, post.id, alice.id)
        await make_comment(unit_env, post.id, bob.id, parent_id=c1.id)

        # Act
        removed = await cascade.delete_comment(c1.id, owner.id)

        # Assert
        assert removed == 2

    @pytest.mark.asyncio
    async def test_stranger_cannot_delete(self, unit_env):
        """Writers cannot delete other people's comments."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        forum, owner, alice, bob = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, owner.id)
        comment = await make_comment(unit_env, post.id, alice.id)

        # Act / Assert
        with pytest.raises(AccessDeniedError):
            await cascade.delete_comment(comment.id, bob.id)

    @pytest.mark.asyncio
    async def test_sibling_threads_survive(self, unit_env):
        """Only the deleted comment's subtree goes."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        comment_repo = await unit_env.get(CommentRepository)
        forum, owner, alice, _ = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, owner.id)
        doomed = await make_comment(unit_env, post.id, alice.id)
        kept = await make_comment(unit_env, post.id, alice.id)

        # Act
        await cascade.delete_comment(doomed.id, alice.id)

        # Assert
        remaining = await comment_repo.find_by_post(post.id)
        assert [c.id for c in remaining] == [kept.id]

    @pytest.mark.asyncio
    async def test_blob_failure_still_removes_records(self, unit_env):
        """A failing blob delete is logged, the records go regardless."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        contents = await unit_env.get(ContentService)
        store = await unit_env.get(ContentStore)
        content_repo = await unit_env.get(ContentRepository)
        comment_repo = await unit_env.get(CommentRepository)
        forum, _, alice, _ = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, alice.id)
        comment = await make_comment(unit_env, post.id, alice.id)
        item = await contents.add_comment_content(
            comment.id, "notes.pdf", b"%PDF", ContentType.DOCUMENT, alice.id
        )
        store.fail_on_delete.add(item.storage_ref)

        # Act
        removed = await cascade.delete_comment(comment.id, alice.id)

        # Assert
        assert removed == 1
        assert await comment_repo.find_by_id(comment.id) is None
        assert await content_repo.find_by_id(item.id) is None
        assert item.storage_ref in store.blobs

    @pytest.mark.asyncio
    async def test_missing_comment(self, unit_env):
        """Unknown comments are NotFound."""
        cascade = await unit_env.get(CascadeCoordinator)
        user = await make_user(unit_env, "someone")

        with pytest.raises(NotFoundError):
            await cascade.delete_comment(CommentId(uuid4()), user.id)


class TestDeletePost:
    """Tests for delete_post."""

    @pytest.mark.asyncio
    async def test_post_cascade_removes_everything(self, unit_env):
        """Two comments, one reply and three files all go with the post."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        contents = await unit_env.get(ContentService)
        store = await unit_env.get(ContentStore)
        post_repo = await unit_env.get(PostRepository)
        comment_repo = await unit_env.get(CommentRepository)
        content_repo = await unit_env.get(ContentRepository)
        forum, owner, alice, bob = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, alice.id)
        c1 = await make_comment(unit_env, post.id, bob.id)
        await make_comment(unit_env, post.id, alice.id)
        reply = await make_comment(unit_env, post.id, bob.id, parent_id=c1.id)
        items = [
            await contents.add_post_content(
                post.id, "cover.jpg", b"jpg", ContentType.IMAGE, alice.id
            ),
            await contents.add_post_content(
                post.id, "inline.png", b"png", ContentType.IMAGE, alice.id, embed=True
            ),
            await contents.add_comment_content(
                reply.id, "clip.mp3", b"mp3", ContentType.AUDIO, bob.id
            ),
        ]

        # Act
        removed = await cascade.delete_post(post.id, alice.id)

        # Assert
        assert removed == 3
        assert await post_repo.find_by_id(post.id) is None
        assert await comment_repo.find_by_post(post.id) == []
        for item in items:
            assert await content_repo.find_by_id(item.id) is None
        blob_refs = {i.storage_ref for i in items if i.is_blob}
        assert blob_refs <= set(store.deleted)
        assert not blob_refs & set(store.blobs)

    @pytest.mark.asyncio
    async def test_admin_can_delete_others_post(self, unit_env):
        """Forum admins may delete any post."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        post_repo = await unit_env.get(PostRepository)
        forum, owner, alice, _ = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, alice.id)

        # Act
        await cascade.delete_post(post.id, owner.id)

        # Assert
        assert await post_repo.find_by_id(post.id) is None

    @pytest.mark.asyncio
    async def test_writer_cannot_delete_others_post(self, unit_env):
        """WRITE is not enough to remove someone else's post."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        post_repo = await unit_env.get(PostRepository)
        forum, _, alice, bob = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, alice.id)

        # Act / Assert
        with pytest.raises(AccessDeniedError):
            await cascade.delete_post(post.id, bob.id)
        assert await post_repo.find_by_id(post.id) is not None

    @pytest.mark.asyncio
    async def test_missing_post(self, unit_env):
        """Unknown posts are NotFound."""
        cascade = await unit_env.get(CascadeCoordinator)
        user = await make_user(unit_env, "someone")

        with pytest.raises(NotFoundError):
            await cascade.delete_post(PostId(uuid4()), user.id)


class TestDeleteContent:
    """Tests for delete_content."""

    @pytest.mark.asyncio
    async def test_author_removes_own_attachment(self, unit_env):
        """The comment's author may remove its file; the blob goes too."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        contents = await unit_env.get(ContentService)
        store = await unit_env.get(ContentStore)
        content_repo = await unit_env.get(ContentRepository)
        forum, owner, alice, _ = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, owner.id)
        comment = await make_comment(unit_env, post.id, alice.id)
        item = await contents.add_comment_content(
            comment.id, "movie.mp4", b"mp4", ContentType.VIDEO, alice.id
        )

        # Act
        await cascade.delete_content(item.id, alice.id)

        # Assert
        assert await content_repo.find_by_id(item.id) is None
        assert item.storage_ref in store.deleted

    @pytest.mark.asyncio
    async def test_other_writer_is_denied(self, unit_env):
        """Bob cannot remove Alice's attachment."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        contents = await unit_env.get(ContentService)
        forum, _, alice, bob = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, alice.id)
        item = await contents.add_post_content(
            post.id, "cover.jpg", b"jpg", ContentType.IMAGE, alice.id
        )

        # Act / Assert
        with pytest.raises(AccessDeniedError):
            await cascade.delete_content(item.id, bob.id)

    @pytest.mark.asyncio
    async def test_admin_removes_any_attachment(self, unit_env):
        """Forum admins may remove any file."""
        # Arrange
        cascade = await unit_env.get(CascadeCoordinator)
        contents = await unit_env.get(ContentService)
        content_repo = await unit_env.get(ContentRepository)
        forum, owner, alice, _ = await _forum_with_members(unit_env)
        post = await make_post(unit_env, forum.id, alice.id)
        item = await contents.add_post_content(
            post.id, "inline.png", b"png", ContentType.IMAGE, alice.id, embed=True
        )

        # Act
        await cascade.delete_content(item.id, owner.id)

        # Assert
        assert await content_repo.find_by_id(item.id) is None

    @pytest.mark.asyncio
    async def test_missing_content(self, unit_env):
        """Unknown content is NotFound."""
        cascade = await unit_env.get(CascadeCoordinator)
        user = await make_user(unit_env, "someone")

        with pytest.raises(NotFoundError):
            await cascade.delete_content(ContentId(uuid4()), user.id)
