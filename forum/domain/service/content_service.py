"""Content attachment service."""

import logfire
from datetime import datetime
from pathlib import PurePath
from uuid import uuid4

from forum.config import StorageSettings
from forum.domain.error import AccessDeniedError, NotFoundError, ValidationError
from forum.domain.model.comment import Comment
from forum.domain.model.content import Content
from forum.domain.model.post import Post
from forum.domain.repository import CommentRepository, ContentRepository, PostRepository
from forum.domain.value import (
    AccessLevel,
    CommentId,
    ContentId,
    ContentType,
    ForumId,
    PostId,
    StorageMode,
    UserId,
)

from .access_resolver import AccessResolver
from .base import Service
from .content_store import ContentStore

EMBEDDED_REF_PREFIX = "db://"


class ContentService(Service):
    """Attaches files to posts and comments and reads them back.

    Embedded items keep their bytes on the content record and get a
    ``db://<uuid><ext>`` reference; blob items hand the bytes to the
    content store and keep the reference it returns. Deleting content is
    a cascade concern and lives in ``CascadeCoordinator``.
    """

    def __init__(
        self,
        content_repository: ContentRepository,
        post_repository: PostRepository,
        comment_repository: CommentRepository,
        content_store: ContentStore,
        access_resolver: AccessResolver,
        storage_settings: StorageSettings,
    ) -> None:
        """Initialize content service.

        Args:
            content_repository: Content repository
            post_repository: Post repository
            comment_repository: Comment repository
            content_store: Blob store for external content
            access_resolver: Access resolution
            storage_settings: Size and extension limits
        """
        self.content_repository = content_repository
        self.post_repository = post_repository
        self.comment_repository = comment_repository
        self.content_store = content_store
        self.access_resolver = access_resolver
        self.storage_settings = storage_settings

    async def add_post_content(
        self,
        post_id: PostId,
        filename: str,
        data: bytes,
        content_type: ContentType,
        acting_user_id: UserId,
        description: str | None = None,
        embed: bool = False,
    ) -> Content:
        """Attach a file to a post.

        Allowed for the post's author and for users with WRITE on its forum.

        Args:
            post_id: Post to attach to
            filename: Original filename
            data: File bytes
            content_type: Kind of file
            acting_user_id: Uploading user
            description: Optional description
            embed: Keep the bytes on the record instead of in the content store

        Returns:
            Created content item

        Raises:
            ValidationError: If the file is empty, too large or of a
                disallowed extension for its type
            NotFoundError: If the post does not exist
            AccessDeniedError: If the user may not attach to the post
            StorageError: If the content store fails to write the blob
        """
        with logfire.span(
            "content_service.add_post_content",
            post_id=str(post_id),
            filename=filename,
            size=len(data),
            embed=embed,
        ):
            self._validate_file(filename, data, content_type)
            post = await self._get_post(post_id)
            await self._authorize_upload(post.author_id, post.forum_id, acting_user_id)
            return await self._insert(
                filename,
                data,
                content_type,
                description,
                embed,
                post_id=post_id,
            )

    async def add_comment_content(
        self,
        comment_id: CommentId,
        filename: str,
        data: bytes,
        content_type: ContentType,
        acting_user_id: UserId,
        description: str | None = None,
        embed: bool = False,
    ) -> Content:
        """Attach a file to a comment.

        Same rules as ``add_post_content``, with the comment's author
        standing in for the post's.
        """
        with logfire.span(
            "content_service.add_comment_content",
            comment_id=str(comment_id),
            filename=filename,
            size=len(data),
            embed=embed,
        ):
            self._validate_file(filename, data, content_type)
            comment = await self._get_comment(comment_id)
            post = await self._get_post(comment.post_id)
            await self._authorize_upload(comment.author_id, post.forum_id, acting_user_id)
            return await self._insert(
                filename,
                data,
                content_type,
                description,
                embed,
                comment_id=comment_id,
            )

    async def list_post_content(
        self, post_id: PostId, acting_user_id: UserId
    ) -> list[Content]:
        """List files attached directly to a post. Requires READ."""
        post = await self._get_post(post_id)
        await self.access_resolver.require_access(
            post.forum_id, acting_user_id, AccessLevel.READ, "read", "post"
        )
        return await self.content_repository.find_by_post(post_id)

    async def list_comment_content(
        self, comment_id: CommentId, acting_user_id: UserId
    ) -> list[Content]:
        """List files attached to a comment. Requires READ."""
        comment = await self._get_comment(comment_id)
        post = await self._get_post(comment.post_id)
        await self.access_resolver.require_access(
            post.forum_id, acting_user_id, AccessLevel.READ, "read", "comment"
        )
        return await self.content_repository.find_by_comments([comment_id])

    async def fetch_content_data(
        self, content_id: ContentId, acting_user_id: UserId
    ) -> bytes:
        """Read the bytes of a content item. Requires READ.

        Raises:
            NotFoundError: If the content or its owner does not exist
            AccessDeniedError: If the user lacks READ
            StorageError: If the content store cannot read the blob
        """
        with logfire.span(
            "content_service.fetch_content_data", content_id=str(content_id)
        ):
            content = await self.content_repository.find_by_id(content_id)
            if content is None:
                logfire.warn("Content not found", content_id=str(content_id))
                raise NotFoundError("Content", str(content_id))

            forum_id = await self._forum_of(content)
            await self.access_resolver.require_access(
                forum_id, acting_user_id, AccessLevel.READ, "read", "content"
            )

            if content.data is not None:
                return content.data
            return await self.content_store.fetch(content.storage_ref)

    def _validate_file(
        self, filename: str, data: bytes, content_type: ContentType
    ) -> None:
        if not filename or not filename.strip():
            raise ValidationError("Filename cannot be empty")
        if not data:
            raise ValidationError("File cannot be empty")
        if len(data) > self.storage_settings.max_file_size:
            raise ValidationError(
                f"File exceeds maximum size of {self.storage_settings.max_file_size} bytes"
            )
        if not self.storage_settings.is_allowed(filename, content_type):
            logfire.warn(
                "Rejected file extension",
                filename=filename,
                content_type=content_type.value,
            )
            raise ValidationError(
                f"File type not allowed for {content_type.value}: {filename}"
            )

    async def _authorize_upload(
        self, author_id: UserId, forum_id: ForumId, acting_user_id: UserId
    ) -> None:
        if author_id == acting_user_id:
            return
        if not await self.access_resolver.has_access(
            forum_id, acting_user_id, AccessLevel.WRITE
        ):
            logfire.warn(
                "Content upload denied",
                forum_id=str(forum_id),
                acting_user_id=str(acting_user_id),
            )
            raise AccessDeniedError("add content to", "forum", str(acting_user_id))

    async def _insert(
        self,
        filename: str,
        data: bytes,
        content_type: ContentType,
        description: str | None,
        embed: bool,
        post_id: PostId | None = None,
        comment_id: CommentId | None = None,
    ) -> Content:
        content_id = ContentId(uuid4())
        if embed:
            mode = StorageMode.EMBEDDED
            ref = f"{EMBEDDED_REF_PREFIX}{content_id}{PurePath(filename).suffix.lower()}"
            payload = data
        else:
            mode = StorageMode.BLOB
            ref = await self.content_store.store(data, filename)
            payload = None

        content = Content(
            id=content_id,
            post_id=post_id,
            comment_id=comment_id,
            filename=filename,
            description=description,
            content_type=content_type,
            storage_mode=mode,
            storage_ref=ref,
            data=payload,
            size=len(data),
            created_at=datetime.now(),
        )
        saved = await self.content_repository.save(content)
        logfire.info(
            "Content added",
            content_id=str(saved.id),
            post_id=str(post_id) if post_id else None,
            comment_id=str(comment_id) if comment_id else None,
            storage_mode=mode.value,
            size=len(data),
        )
        return saved

    async def _forum_of(self, content: Content) -> ForumId:
        if content.post_id is not None:
            return (await self._get_post(content.post_id)).forum_id
        comment = await self._get_comment(content.comment_id)
        return (await self._get_post(comment.post_id)).forum_id

    async def _get_post(self, post_id: PostId) -> Post:
        post = await self.post_repository.find_by_id(post_id)
        if post is None:
            logfire.warn("Post not found", post_id=str(post_id))
            raise NotFoundError("Post", str(post_id))
        return post

    async def _get_comment(self, comment_id: CommentId) -> Comment:
        comment = await self.comment_repository.find_by_id(comment_id)
        if comment is None:
            logfire.warn("Comment not found", comment_id=str(comment_id))
            raise NotFoundError("Comment", str(comment_id))
        return comment
