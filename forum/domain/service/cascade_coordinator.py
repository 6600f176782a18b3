"""Cascading deletion of comments, posts and content."""

import logfire
from typing import Sequence

from forum.domain.error import AccessDeniedError, NotFoundError, StorageError
from forum.domain.model.comment import Comment
from forum.domain.model.content import Content
from forum.domain.model.post import Post
from forum.domain.repository import CommentRepository, ContentRepository, PostRepository
from forum.domain.value import (
    AccessLevel,
    CommentId,
    ContentId,
    ForumId,
    PostId,
    UserId,
)

from .access_resolver import AccessResolver
from .base import Service
from .content_store import ContentStore


class CascadeCoordinator(Service):
    """Removes records together with everything that depends on them.

    Each deletion first authorizes and collects the full set of affected
    records, then purges blobs, then removes content rows and finally the
    comments (replies before parents) and the post. Nothing is written
    until every check has passed, so a refusal leaves the store untouched.

    Blob removal is best effort: a failing ``ContentStore.delete`` is logged
    and the records are removed anyway.
    """

    def __init__(
        self,
        post_repository: PostRepository,
        comment_repository: CommentRepository,
        content_repository: ContentRepository,
        content_store: ContentStore,
        access_resolver: AccessResolver,
    ) -> None:
        """Initialize cascade coordinator.

        Args:
            post_repository: Post repository
            comment_repository: Comment repository
            content_repository: Content repository
            content_store: Blob store for external content
            access_resolver: Access resolution
        """
        self.post_repository = post_repository
        self.comment_repository = comment_repository
        self.content_repository = content_repository
        self.content_store = content_store
        self.access_resolver = access_resolver

    async def delete_comment(self, comment_id: CommentId, acting_user_id: UserId) -> int:
        """Delete a comment with every reply below it and all their content.

        The acting user must be, for the comment and for each reply in its
        thread, the comment's author, the post's author or an admin of the
        post's forum.

        Args:
            comment_id: Comment to delete
            acting_user_id: User performing the deletion

        Returns:
            Number of comments removed (the comment plus its replies)

        Raises:
            NotFoundError: If the comment or its post does not exist
            AccessDeniedError: If the acting user may not delete the comment
                or any reply below it
        """
        with logfire.span(
            "cascade_coordinator.delete_comment",
            comment_id=str(comment_id),
            acting_user_id=str(acting_user_id),
        ):
            comment = await self.comment_repository.find_by_id(comment_id)
            if comment is None:
                logfire.warn("Comment not found", comment_id=str(comment_id))
                raise NotFoundError("Comment", str(comment_id))
            post = await self._get_post(comment.post_id)

            moderator = acting_user_id == post.author_id or (
                await self.access_resolver.has_access(
                    post.forum_id, acting_user_id, AccessLevel.ADMIN
                )
            )

            def authorize(target: Comment) -> None:
                if moderator or target.author_id == acting_user_id:
                    return
                logfire.warn(
                    "Comment deletion denied",
                    comment_id=str(comment_id),
                    blocking_comment_id=str(target.id),
                    acting_user_id=str(acting_user_id),
                )
                raise AccessDeniedError("delete", "comment", str(acting_user_id))

            authorize(comment)
            levels = await self._collect_thread(comment, authorize)
            ordered = [c.id for level in reversed(levels) for c in level]

            contents = await self.content_repository.find_by_comments(ordered)
            await self._remove_contents(contents)
            removed = await self.comment_repository.delete_many(ordered)

            logfire.info(
                "Comment deleted",
                comment_id=str(comment_id),
                comments_removed=removed,
                contents_removed=len(contents),
            )
            return removed

    async def delete_post(self, post_id: PostId, acting_user_id: UserId) -> int:
        """Delete a post with all of its comments and content.

        Requires the acting user to be the post's author or an admin of the
        post's forum.

        Returns:
            Number of comments removed along with the post

        Raises:
            NotFoundError: If the post does not exist
            AccessDeniedError: If the acting user may not delete the post
        """
        with logfire.span(
            "cascade_coordinator.delete_post",
            post_id=str(post_id),
            acting_user_id=str(acting_user_id),
        ):
            post = await self._get_post(post_id)
            if acting_user_id != post.author_id:
                await self.access_resolver.require_access(
                    post.forum_id, acting_user_id, AccessLevel.ADMIN, "delete", "post"
                )

            removed = await self._remove_post(post)
            logfire.info("Post deleted", post_id=str(post_id), comments_removed=removed)
            return removed

    async def delete_content(self, content_id: ContentId, acting_user_id: UserId) -> None:
        """Delete a single content item.

        Requires the acting user to be the author of the owning post or
        comment, or an admin of its forum.

        Raises:
            NotFoundError: If the content or its owner does not exist
            AccessDeniedError: If the acting user may not delete it
        """
        with logfire.span(
            "cascade_coordinator.delete_content",
            content_id=str(content_id),
            acting_user_id=str(acting_user_id),
        ):
            content = await self.content_repository.find_by_id(content_id)
            if content is None:
                logfire.warn("Content not found", content_id=str(content_id))
                raise NotFoundError("Content", str(content_id))

            author_id, forum_id = await self._owner_of(content)
            if acting_user_id != author_id:
                await self.access_resolver.require_access(
                    forum_id, acting_user_id, AccessLevel.ADMIN, "delete", "content"
                )

            await self._remove_contents([content])
            logfire.info(
                "Content deleted",
                content_id=str(content_id),
                storage_mode=content.storage_mode.value,
            )

    async def delete_forum_posts(self, forum_id: ForumId) -> int:
        """Delete every post of a forum with its comments and content.

        Authorization is the caller's responsibility.

        Returns:
            Number of posts removed
        """
        with logfire.span(
            "cascade_coordinator.delete_forum_posts", forum_id=str(forum_id)
        ):
            posts = await self.post_repository.find_by_forum(forum_id)
            for post in posts:
                await self._remove_post(post)
            return len(posts)

    async def _get_post(self, post_id: PostId) -> Post:
        post = await self.post_repository.find_by_id(post_id)
        if post is None:
            logfire.warn("Post not found", post_id=str(post_id))
            raise NotFoundError("Post", str(post_id))
        return post

    async def _owner_of(self, content: Content) -> tuple[UserId, ForumId]:
        """Author of the post or comment holding ``content``, and its forum."""
        if content.post_id is not None:
            post = await self._get_post(content.post_id)
            return post.author_id, post.forum_id

        comment = await self.comment_repository.find_by_id(content.comment_id)
        if comment is None:
            raise NotFoundError("Comment", str(content.comment_id))
        post = await self._get_post(comment.post_id)
        return comment.author_id, post.forum_id

    async def _collect_thread(self, root: Comment, authorize) -> list[list[Comment]]:
        """Gather the reply tree below ``root`` one level at a time.

        ``authorize`` is applied to every reply as it is found.

        Returns:
            Levels of the thread, ``root`` alone in the first
        """
        levels = [[root]]
        seen: set[CommentId] = {root.id}
        frontier = [root.id]
        while frontier:
            replies = [
                reply
                for reply in await self.comment_repository.find_children(frontier)
                if reply.id not in seen
            ]
            if not replies:
                break
            for reply in replies:
                authorize(reply)
                seen.add(reply.id)
            levels.append(replies)
            frontier = [reply.id for reply in replies]
        return levels

    async def _remove_post(self, post: Post) -> int:
        comments = await self.comment_repository.find_by_post(post.id)
        ordered = [c.id for c in _deepest_first(comments)]

        contents = await self.content_repository.find_by_post(post.id)
        if ordered:
            contents += await self.content_repository.find_by_comments(ordered)

        await self._remove_contents(contents)
        removed = await self.comment_repository.delete_many(ordered) if ordered else 0
        await self.post_repository.delete(post.id)
        return removed

    async def _remove_contents(self, contents: Sequence[Content]) -> None:
        if not contents:
            return
        await self._purge_blobs(contents)
        await self.content_repository.delete_many([c.id for c in contents])

    async def _purge_blobs(self, contents: Sequence[Content]) -> int:
        """Delete external blobs, logging failures instead of raising.

        Returns:
            Number of blobs that could not be removed
        """
        failed = 0
        for content in contents:
            if not content.is_blob:
                continue
            try:
                await self.content_store.delete(content.storage_ref)
            except StorageError as e:
                failed += 1
                logfire.warn(
                    "Failed to delete content blob",
                    content_id=str(content.id),
                    storage_ref=content.storage_ref,
                    error=str(e),
                )
        return failed


def _deepest_first(comments: Sequence[Comment]) -> list[Comment]:
    """Order comments of one post so every reply precedes its parent."""
    by_parent: dict[CommentId | None, list[Comment]] = {}
    ids = {c.id for c in comments}
    for comment in comments:
        parent = comment.parent_id if comment.parent_id in ids else None
        by_parent.setdefault(parent, []).append(comment)

    levels: list[list[Comment]] = []
    seen: set[CommentId] = set()
    frontier = by_parent.get(None, [])
    while frontier:
        levels.append(frontier)
        seen.update(c.id for c in frontier)
        frontier = [
            child
            for c in frontier
            for child in by_parent.get(c.id, [])
            if child.id not in seen
        ]

    ordered = [c for level in reversed(levels) for c in level]
    # Anything unreachable from a top-level comment goes first
    stragglers = [c for c in comments if c.id not in seen]
    return stragglers + ordered
