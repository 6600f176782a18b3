"""Forum repository interface."""

from abc import ABC, abstractmethod
from typing import List, Optional

from forum.domain.model.forum import Forum
from forum.domain.value import ForumId


class ForumRepository(ABC):
    """Repository for Forum entity.

    Stores the tree as parent references only. Implementations must not
    assume the stored graph is acyclic; the hierarchy manager guards that.
    """

    @abstractmethod
    async def find_by_id(self, forum_id: ForumId) -> Optional[Forum]:
        """Find a forum by ID.

        Args:
            forum_id: The forum's unique identifier

        Returns:
            The forum if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_lineage(self, forum_id: ForumId, limit: int) -> List[Forum]:
        """Read a forum and its ancestors in one consistent read.

        Follows parent references from ``forum_id`` upward and stops at a
        root, a missing parent, or after ``limit`` forums. A loop in stored
        data shows up as repeated forums rather than being detected here.

        Args:
            forum_id: Forum to start from
            limit: Maximum number of forums returned

        Returns:
            ``[forum, parent, ..., root]``, empty if the forum does not exist
        """
        pass

    @abstractmethod
    async def exists(self, forum_id: ForumId) -> bool:
        """Check whether a forum exists."""
        pass

    @abstractmethod
    async def find_roots(self) -> List[Forum]:
        """Find all forums without a parent, ordered by name."""
        pass

    @abstractmethod
    async def find_children(self, parent_id: ForumId) -> List[Forum]:
        """Find the direct children of a forum, ordered by name."""
        pass

    @abstractmethod
    async def has_children(self, forum_id: ForumId) -> bool:
        """Check whether a forum has at least one direct child."""
        pass

    @abstractmethod
    async def find_sibling_by_name(
        self,
        parent_id: Optional[ForumId],
        name: str,
        exclude_id: Optional[ForumId] = None,
    ) -> Optional[Forum]:
        """Find a forum by name among the children of ``parent_id``.

        Matching is case-insensitive. With ``parent_id`` None the root
        forums are searched.

        Args:
            parent_id: Parent whose children are searched, None for roots
            name: Name to look for
            exclude_id: Forum to ignore (the one being renamed or moved)

        Returns:
            The clashing forum if any, None otherwise
        """
        pass

    @abstractmethod
    async def search_by_name(self, term: str) -> List[Forum]:
        """Find forums whose name contains ``term`` (case-insensitive)."""
        pass

    @abstractmethod
    async def save(self, forum: Forum) -> Forum:
        """Save a forum (create or update)."""
        pass

    @abstractmethod
    async def delete(self, forum_id: ForumId) -> None:
        """Delete a forum record."""
        pass

    @abstractmethod
    async def lock(self, forum_id: ForumId) -> None:
        """Take the store-level exclusive lock on a forum.

        The lock is held until the surrounding transaction ends. Stores
        without transactions may treat this as a no-op.
        """
        pass

    @abstractmethod
    async def lock_tree(self) -> None:
        """Take the store-level lock serializing structural tree changes.

        Held until the surrounding transaction ends. Stores without
        transactions may treat this as a no-op.
        """
        pass
