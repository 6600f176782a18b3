"""Content entity.

A content item is a file attached to exactly one post or exactly one
comment. Its bytes are either embedded in the record or kept by the
content store, in which case ``storage_ref`` is what the store returned.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from forum.domain.model.common import DomainModel
from forum.domain.value import CommentId, ContentId, ContentType, PostId, StorageMode


class Content(DomainModel):
    """File attached to a post or a comment."""

    id: ContentId
    post_id: Optional[PostId] = None
    comment_id: Optional[CommentId] = None
    filename: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    content_type: ContentType
    storage_mode: StorageMode
    storage_ref: str = Field(min_length=1)
    data: Optional[bytes] = None
    size: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=datetime.now)

    @model_validator(mode="after")
    def validate_owner_and_storage(self) -> "Content":
        """Exactly one owner; embedded items carry their bytes, blobs don't."""
        if (self.post_id is None) == (self.comment_id is None):
            raise ValueError("Content must belong to exactly one post or comment")
        if self.storage_mode == StorageMode.EMBEDDED and self.data is None:
            raise ValueError("Embedded content requires data")
        if self.storage_mode == StorageMode.BLOB and self.data is not None:
            raise ValueError("Blob content must not carry embedded data")
        return self

    @property
    def is_blob(self) -> bool:
        return self.storage_mode == StorageMode.BLOB
