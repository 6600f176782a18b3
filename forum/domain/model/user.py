"""User entity.

Users are looked up by the engine but never authenticated by it; the
caller hands over an already verified user id.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from forum.domain.model.common import DomainModel
from forum.domain.value import UserId, Username


class User(DomainModel):
    """Registered forum member."""

    id: UserId
    username: Username
    email: Optional[str] = None
    display_name: Optional[str] = None
    active: bool = True
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
