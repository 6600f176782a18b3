"""Comment entity.

Comments hang off a post. A reply points at its parent comment, which
must belong to the same post, so each post carries its own reply tree.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from forum.domain.model.common import DomainModel
from forum.domain.value import CommentId, PostId, UserId


class Comment(DomainModel):
    """Comment on a post or reply to another comment."""

    id: CommentId
    post_id: PostId
    author_id: UserId
    body: str = Field(min_length=1)
    parent_id: Optional[CommentId] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None
