"""In-memory forum repository for testing."""

from typing import Optional

from forum.domain.model.forum import Forum
from forum.domain.repository.forum import ForumRepository
from forum.domain.value import ForumId


class InMemoryForumRepository(ForumRepository):
    """In-memory implementation of ForumRepository for testing.

    ``lock`` and ``lock_tree`` are no-ops; the in-process locks held by the
    services are all the exclusion a single event loop needs.
    """

    def __init__(self) -> None:
        self._forums: dict[ForumId, Forum] = {}

    async def find_by_id(self, forum_id: ForumId) -> Optional[Forum]:
        """Find a forum by ID."""
        return self._forums.get(forum_id)

    async def find_lineage(self, forum_id: ForumId, limit: int) -> list[Forum]:
        """Walk parent references without yielding, so the chain is one snapshot."""
        chain: list[Forum] = []
        current = self._forums.get(forum_id)
        while current is not None and len(chain) < limit:
            chain.append(current)
            if current.parent_id is None:
                break
            current = self._forums.get(current.parent_id)
        return chain

    async def exists(self, forum_id: ForumId) -> bool:
        """Check whether a forum exists."""
        return forum_id in self._forums

    async def find_roots(self) -> list[Forum]:
        """Find all root forums, ordered by name."""
        return self._sorted(f for f in self._forums.values() if f.parent_id is None)

    async def find_children(self, parent_id: ForumId) -> list[Forum]:
        """Find the direct children of a forum, ordered by name."""
        return self._sorted(
            f for f in self._forums.values() if f.parent_id == parent_id
        )

    async def has_children(self, forum_id: ForumId) -> bool:
        """Check whether a forum has at least one child."""
        return any(f.parent_id == forum_id for f in self._forums.values())

    async def find_sibling_by_name(
        self,
        parent_id: Optional[ForumId],
        name: str,
        exclude_id: Optional[ForumId] = None,
    ) -> Optional[Forum]:
        """Find a forum by name (case-insensitive) among a parent's children."""
        for forum in self._forums.values():
            if forum.parent_id != parent_id or forum.id == exclude_id:
                continue
            if forum.name.matches(name):
                return forum
        return None

    async def search_by_name(self, term: str) -> list[Forum]:
        """Find forums whose name contains ``term`` (case-insensitive)."""
        needle = term.lower()
        return self._sorted(f for f in self._forums.values() if needle in f.name.key)

    async def save(self, forum: Forum) -> Forum:
        """Save a forum."""
        self._forums[forum.id] = forum
        return forum

    async def delete(self, forum_id: ForumId) -> None:
        """Delete a forum."""
        self._forums.pop(forum_id, None)

    async def lock(self, forum_id: ForumId) -> None:
        """No-op."""
        pass

    async def lock_tree(self) -> None:
        """No-op."""
        pass

    @staticmethod
    def _sorted(forums) -> list[Forum]:
        return sorted(forums, key=lambda f: f.name.key)
