"""Comment domain service."""

import logfire
from datetime import datetime
from uuid import uuid4

from forum.domain.error import AccessDeniedError, NotFoundError, ValidationError
from forum.domain.model.comment import Comment
from forum.domain.model.post import Post
from forum.domain.repository import CommentRepository, PostRepository
from forum.domain.value import AccessLevel, CommentId, PostId, UserId

from .access_resolver import AccessResolver
from .base import Service


class CommentService(Service):
    """Domain service for comment operations.

    Deleting a comment is a cascade and lives in ``CascadeCoordinator``.
    """

    def __init__(
        self,
        comment_repository: CommentRepository,
        post_repository: PostRepository,
        access_resolver: AccessResolver,
    ) -> None:
        """Initialize comment service.

        Args:
            comment_repository: Comment repository
            post_repository: Post repository
            access_resolver: Access resolution
        """
        self.comment_repository = comment_repository
        self.post_repository = post_repository
        self.access_resolver = access_resolver

    async def create_comment(
        self, post_id: PostId, body: str, acting_user_id: UserId
    ) -> Comment:
        """Comment on a post. Requires WRITE on the post's forum.

        Raises:
            ValidationError: If the body is blank
            NotFoundError: If the post does not exist
            AccessDeniedError: If the user lacks WRITE
        """
        with logfire.span(
            "comment_service.create_comment",
            post_id=str(post_id),
            acting_user_id=str(acting_user_id),
        ):
            body = _clean_body(body)
            post = await self._get_post(post_id)
            return await self._insert(post, None, body, acting_user_id)

    async def create_reply(
        self, parent_comment_id: CommentId, body: str, acting_user_id: UserId
    ) -> Comment:
        """Reply to a comment. Requires WRITE on the post's forum.

        Args:
            parent_comment_id: Comment being replied to
            body: Reply text
            acting_user_id: Author

        Returns:
            Created reply, attached to the parent's post

        Raises:
            ValidationError: If the body is blank
            NotFoundError: If the parent comment or its post does not exist
            AccessDeniedError: If the user lacks WRITE
        """
        with logfire.span(
            "comment_service.create_reply",
            parent_id=str(parent_comment_id),
            acting_user_id=str(acting_user_id),
        ):
            body = _clean_body(body)
            parent = await self._get(parent_comment_id)
            post = await self._get_post(parent.post_id)
            return await self._insert(post, parent.id, body, acting_user_id)

    async def get_comment(self, comment_id: CommentId, acting_user_id: UserId) -> Comment:
        """Get a comment. Requires READ on its forum.

        Raises:
            NotFoundError: If the comment does not exist
            AccessDeniedError: If the user lacks READ
        """
        comment = await self._get(comment_id)
        post = await self._get_post(comment.post_id)
        await self.access_resolver.require_access(
            post.forum_id, acting_user_id, AccessLevel.READ, "read", "comment"
        )
        return comment

    async def list_comments(self, post_id: PostId, acting_user_id: UserId) -> list[Comment]:
        """List top-level comments of a post, oldest first. Requires READ."""
        with logfire.span("comment_service.list_comments", post_id=str(post_id)):
            post = await self._get_post(post_id)
            await self.access_resolver.require_access(
                post.forum_id, acting_user_id, AccessLevel.READ, "read", "post"
            )
            comments = await self.comment_repository.find_by_post(
                post_id, top_level_only=True
            )
            logfire.info("Comments listed", post_id=str(post_id), count=len(comments))
            return comments

    async def list_replies(
        self, comment_id: CommentId, acting_user_id: UserId
    ) -> list[Comment]:
        """List direct replies to a comment, oldest first. Requires READ."""
        comment = await self.get_comment(comment_id, acting_user_id)
        return await self.comment_repository.find_children([comment.id])

    async def update_comment(
        self, comment_id: CommentId, body: str, acting_user_id: UserId
    ) -> Comment:
        """Edit a comment. Allowed for its author and forum admins.

        Raises:
            ValidationError: If the body is blank
            NotFoundError: If the comment does not exist
            AccessDeniedError: If the user is neither author nor admin
        """
        with logfire.span(
            "comment_service.update_comment",
            comment_id=str(comment_id),
            acting_user_id=str(acting_user_id),
        ):
            body = _clean_body(body)
            comment = await self._get(comment_id)
            if comment.author_id != acting_user_id:
                post = await self._get_post(comment.post_id)
                if not await self.access_resolver.has_access(
                    post.forum_id, acting_user_id, AccessLevel.ADMIN
                ):
                    logfire.warn(
                        "Comment update denied",
                        comment_id=str(comment_id),
                        acting_user_id=str(acting_user_id),
                    )
                    raise AccessDeniedError("update", "comment", str(acting_user_id))

            saved = await self.comment_repository.save(
                comment.model_copy(update={"body": body, "updated_at": datetime.now()})
            )
            logfire.info("Comment updated", comment_id=str(comment_id))
            return saved

    async def _insert(
        self,
        post: Post,
        parent_id: CommentId | None,
        body: str,
        acting_user_id: UserId,
    ) -> Comment:
        await self.access_resolver.require_access(
            post.forum_id, acting_user_id, AccessLevel.WRITE, "comment in"
        )
        now = datetime.now()
        comment = Comment(
            id=CommentId(uuid4()),
            post_id=post.id,
            author_id=acting_user_id,
            body=body,
            parent_id=parent_id,
            created_at=now,
            updated_at=now,
        )
        saved = await self.comment_repository.save(comment)
        logfire.info(
            "Comment created",
            comment_id=str(saved.id),
            post_id=str(post.id),
            parent_id=str(parent_id) if parent_id else None,
        )
        return saved

    async def _get(self, comment_id: CommentId) -> Comment:
        comment = await self.comment_repository.find_by_id(comment_id)
        if comment is None:
            logfire.warn("Comment not found", comment_id=str(comment_id))
            raise NotFoundError("Comment", str(comment_id))
        return comment

    async def _get_post(self, post_id: PostId) -> Post:
        post = await self.post_repository.find_by_id(post_id)
        if post is None:
            raise NotFoundError("Post", str(post_id))
        return post


def _clean_body(body: str) -> str:
    if not body.strip():
        raise ValidationError("Comment body cannot be empty")
    return body
