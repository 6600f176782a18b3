"""Access grant entity."""

from datetime import datetime

from pydantic import Field

from forum.domain.model.common import DomainModel
from forum.domain.value import AccessGrantId, AccessLevel, ForumId, UserId


class AccessGrant(DomainModel):
    """A user's access level on one forum.

    At most one grant exists per (user, forum); granting again replaces the
    level of the existing grant.
    """

    id: AccessGrantId
    user_id: UserId
    forum_id: ForumId
    level: AccessLevel
    granted_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_admin(self) -> bool:
        return self.level == AccessLevel.ADMIN
