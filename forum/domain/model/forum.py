"""Forum entity.

Forums form a tree. Each forum stores only the id of its parent; children
are found by querying for forums whose ``parent_id`` points back. The tree
must stay acyclic and sibling names unique (case-insensitive), both of
which are enforced by the hierarchy manager at mutation time.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from forum.domain.model.common import DomainModel
from forum.domain.value import ForumId, ForumName


class Forum(DomainModel):
    """Node in the forum tree."""

    id: ForumId
    name: ForumName
    description: Optional[str] = None
    parent_id: Optional[ForumId] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_root(self) -> bool:
        """True when the forum has no parent."""
        return self.parent_id is None
