"""Post domain service."""

import logfire
from datetime import datetime
from uuid import uuid4

from forum.domain.error import AccessDeniedError, NotFoundError, ValidationError
from forum.domain.model.post import Post
from forum.domain.repository import ForumRepository, PostRepository
from forum.domain.value import AccessLevel, ForumId, PostId, UserId

from .access_resolver import AccessResolver
from .base import Service

TITLE_MAX_LENGTH = 300


class PostService(Service):
    """Domain service for post operations.

    Deleting a post is a cascade and lives in ``CascadeCoordinator``.
    """

    def __init__(
        self,
        post_repository: PostRepository,
        forum_repository: ForumRepository,
        access_resolver: AccessResolver,
    ) -> None:
        """Initialize post service.

        Args:
            post_repository: Post repository
            forum_repository: Forum repository
            access_resolver: Access resolution
        """
        self.post_repository = post_repository
        self.forum_repository = forum_repository
        self.access_resolver = access_resolver

    async def create_post(
        self,
        forum_id: ForumId,
        title: str,
        body: str,
        acting_user_id: UserId,
    ) -> Post:
        """Create a post in a forum. Requires WRITE.

        Args:
            forum_id: Forum to post in
            title: Post title
            body: Post body
            acting_user_id: Author

        Returns:
            Created post

        Raises:
            ValidationError: If title or body is blank, or the title is too long
            NotFoundError: If the forum does not exist
            AccessDeniedError: If the author lacks WRITE on the forum
        """
        with logfire.span(
            "post_service.create_post",
            forum_id=str(forum_id),
            acting_user_id=str(acting_user_id),
        ):
            title = _clean_title(title)
            body = _clean_body(body)

            if not await self.forum_repository.exists(forum_id):
                logfire.warn("Forum not found", forum_id=str(forum_id))
                raise NotFoundError("Forum", str(forum_id))
            await self.access_resolver.require_access(
                forum_id, acting_user_id, AccessLevel.WRITE, "post in"
            )

            now = datetime.now()
            post = Post(
                id=PostId(uuid4()),
                forum_id=forum_id,
                author_id=acting_user_id,
                title=title,
                body=body,
                created_at=now,
                updated_at=now,
            )
            saved = await self.post_repository.save(post)
            logfire.info(
                "Post created",
                post_id=str(saved.id),
                forum_id=str(forum_id),
                author_id=str(acting_user_id),
            )
            return saved

    async def get_post(self, post_id: PostId, acting_user_id: UserId) -> Post:
        """Get a post. Requires READ on its forum.

        Raises:
            NotFoundError: If the post does not exist
            AccessDeniedError: If the user lacks READ
        """
        post = await self._get(post_id)
        await self.access_resolver.require_access(
            post.forum_id, acting_user_id, AccessLevel.READ, "read", "post"
        )
        return post

    async def list_posts(
        self,
        forum_id: ForumId,
        acting_user_id: UserId,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Post]:
        """List posts of a forum, newest first. Requires READ.

        Raises:
            NotFoundError: If the forum does not exist
            AccessDeniedError: If the user lacks READ
        """
        with logfire.span(
            "post_service.list_posts",
            forum_id=str(forum_id),
            limit=limit,
            offset=offset,
        ):
            if not await self.forum_repository.exists(forum_id):
                raise NotFoundError("Forum", str(forum_id))
            await self.access_resolver.require_access(
                forum_id, acting_user_id, AccessLevel.READ, "read"
            )
            posts = await self.post_repository.find_by_forum(
                forum_id, limit=limit, offset=offset
            )
            logfire.info("Posts listed", forum_id=str(forum_id), count=len(posts))
            return posts

    async def update_post(
        self,
        post_id: PostId,
        acting_user_id: UserId,
        title: str | None = None,
        body: str | None = None,
    ) -> Post:
        """Edit a post. Allowed for its author and forum admins.

        Raises:
            ValidationError: If a supplied title or body is blank
            NotFoundError: If the post does not exist
            AccessDeniedError: If the user is neither author nor admin
        """
        with logfire.span(
            "post_service.update_post",
            post_id=str(post_id),
            acting_user_id=str(acting_user_id),
        ):
            changes: dict = {}
            if title is not None:
                changes["title"] = _clean_title(title)
            if body is not None:
                changes["body"] = _clean_body(body)

            post = await self._get(post_id)
            is_author = post.author_id == acting_user_id
            if not is_author and not await self.access_resolver.has_access(
                post.forum_id, acting_user_id, AccessLevel.ADMIN
            ):
                logfire.warn(
                    "Post update denied",
                    post_id=str(post_id),
                    acting_user_id=str(acting_user_id),
                )
                raise AccessDeniedError("update", "post", str(acting_user_id))

            if not changes:
                return post

            changes["updated_at"] = datetime.now()
            saved = await self.post_repository.save(post.model_copy(update=changes))
            logfire.info("Post updated", post_id=str(post_id))
            return saved

    async def _get(self, post_id: PostId) -> Post:
        post = await self.post_repository.find_by_id(post_id)
        if post is None:
            logfire.warn("Post not found", post_id=str(post_id))
            raise NotFoundError("Post", str(post_id))
        return post


def _clean_title(title: str) -> str:
    title = title.strip()
    if not title:
        raise ValidationError("Post title cannot be empty")
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(f"Post title must be at most {TITLE_MAX_LENGTH} characters")
    return title


def _clean_body(body: str) -> str:
    if not body.strip():
        raise ValidationError("Post body cannot be empty")
    return body
