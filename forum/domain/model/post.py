"""Post entity."""

from datetime import datetime

from pydantic import Field

from forum.domain.model.common import DomainModel
from forum.domain.value import ForumId, PostId, UserId


class Post(DomainModel):
    """Post in a forum, written by one author."""

    id: PostId
    forum_id: ForumId
    author_id: UserId
    title: str = Field(min_length=1, max_length=300)
    body: str = Field(min_length=1)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
