"""In-process locks for forum mutations."""

import asyncio
from weakref import WeakValueDictionary

from forum.domain.value import ForumId


class ForumLockRegistry:
    """Process-wide registry of asyncio locks.

    One lock per forum serializes access-grant changes on that forum; a
    single tree lock serializes structural changes (create, rename, move,
    delete). Must be shared by every request in the process, so it is
    provided at application scope.

    Forum locks are held weakly: an entry lives only while some task holds
    or waits on the lock, so deleted and idle forums cost nothing.

    Acquisition order is always tree lock before forum lock.
    """

    def __init__(self) -> None:
        self._forum_locks: WeakValueDictionary[ForumId, asyncio.Lock] = (
            WeakValueDictionary()
        )
        self._tree_lock = asyncio.Lock()

    def __len__(self) -> int:
        """Number of forum locks currently in use."""
        return len(self._forum_locks)

    def for_forum(self, forum_id: ForumId) -> asyncio.Lock:
        """Lock guarding the grants of one forum."""
        lock = self._forum_locks.get(forum_id)
        if lock is None:
            lock = asyncio.Lock()
            self._forum_locks[forum_id] = lock
        return lock

    @property
    def tree(self) -> asyncio.Lock:
        """Lock guarding the shape of the forum tree."""
        return self._tree_lock
