"""Access resolution over the forum tree."""

import logfire

from forum.config import HierarchySettings
from forum.domain.error import AccessDeniedError, BusinessRuleViolationError, NotFoundError
from forum.domain.model.forum import Forum
from forum.domain.repository import AccessRepository, ForumRepository
from forum.domain.value import AccessLevel, ForumId, UserId

from .base import Service
from .user_service import UserService


class AccessResolver(Service):
    """Answers whether a user holds a level on a forum.

    A direct grant on a forum covers the forum itself and, by inheritance,
    every forum below it. Resolution therefore walks from the forum up
    through its ancestors until a satisfying grant or the root is reached.
    """

    def __init__(
        self,
        forum_repository: ForumRepository,
        access_repository: AccessRepository,
        user_service: UserService,
        hierarchy_settings: HierarchySettings,
    ) -> None:
        """Initialize access resolver.

        Args:
            forum_repository: Forum repository
            access_repository: Access grant repository
            user_service: User directory
            hierarchy_settings: Tree limits (maximum walk depth)
        """
        self.forum_repository = forum_repository
        self.access_repository = access_repository
        self.user_service = user_service
        self.max_depth = hierarchy_settings.max_depth

    async def has_access(
        self, forum_id: ForumId, user_id: UserId, required_level: AccessLevel
    ) -> bool:
        """Check whether a user holds at least ``required_level`` on a forum.

        Never raises: unknown or inactive users and unknown forums simply
        have no access. A cycle or over-deep chain in stored data ends the
        walk with False.

        Args:
            forum_id: Forum to check
            user_id: User to check
            required_level: Level the caller needs

        Returns:
            True if a grant on the forum or one of its ancestors satisfies
            the level
        """
        with logfire.span(
            "access_resolver.has_access",
            forum_id=str(forum_id),
            user_id=str(user_id),
            required_level=required_level.value,
        ):
            if not await self.user_service.is_active(user_id):
                return False

            try:
                chain = await self._read_lineage(forum_id)
            except BusinessRuleViolationError as e:
                logfire.error(
                    "Forum ancestry walk aborted", forum_id=str(forum_id), reason=str(e)
                )
                return False
            if not chain or chain[-1].parent_id is not None:
                # Unknown forum or dangling parent reference
                return False

            for forum in chain:
                grant = await self.access_repository.find(user_id, forum.id)
                if grant is not None and grant.level.satisfies(required_level):
                    logfire.debug(
                        "Access granted",
                        forum_id=str(forum_id),
                        via_forum_id=str(forum.id),
                        grant_level=grant.level.value,
                    )
                    return True

            return False

    async def require_access(
        self,
        forum_id: ForumId,
        user_id: UserId,
        required_level: AccessLevel,
        action: str,
        resource: str = "forum",
    ) -> None:
        """Raise unless the user holds ``required_level`` on the forum.

        Raises:
            AccessDeniedError: If access is not held
        """
        if not await self.has_access(forum_id, user_id, required_level):
            logfire.warn(
                "Access denied",
                forum_id=str(forum_id),
                user_id=str(user_id),
                required_level=required_level.value,
                action=action,
            )
            raise AccessDeniedError(action, resource, str(user_id))

    async def lineage(self, forum_id: ForumId) -> list[Forum]:
        """Return the forum followed by its ancestors, nearest first.

        Args:
            forum_id: Forum to start from

        Returns:
            ``[forum, parent, grandparent, ..., root]``

        Raises:
            NotFoundError: If the forum does not exist
            BusinessRuleViolationError: If stored parent links loop or the
                chain is deeper than the configured maximum
        """
        chain = await self._read_lineage(forum_id)
        if not chain:
            raise NotFoundError("Forum", str(forum_id))
        return chain

    async def _read_lineage(self, forum_id: ForumId) -> list[Forum]:
        # One extra forum reveals a chain deeper than the maximum
        chain = await self.forum_repository.find_lineage(forum_id, self.max_depth + 1)
        seen: set[ForumId] = set()
        for forum in chain:
            if forum.id in seen:
                raise BusinessRuleViolationError(
                    f"Forum hierarchy contains a cycle at forum {forum.id}"
                )
            seen.add(forum.id)
        if len(chain) > self.max_depth:
            raise BusinessRuleViolationError(
                f"Forum hierarchy deeper than {self.max_depth} levels"
            )
        return chain

    async def get_accessible_forums(self, user_id: UserId) -> list[Forum]:
        """Get forums the user holds a direct grant on.

        Raises:
            NotFoundError: If the user does not exist
        """
        with logfire.span(
            "access_resolver.get_accessible_forums", user_id=str(user_id)
        ):
            await self.user_service.get_user_by_id(user_id)
            grants = await self.access_repository.find_by_user(user_id)
            return await self._forums_of(grants)

    async def get_forums_by_access_level(
        self, user_id: UserId, level: AccessLevel
    ) -> list[Forum]:
        """Get forums where the user's direct grant is exactly ``level``.

        Raises:
            NotFoundError: If the user does not exist
        """
        with logfire.span(
            "access_resolver.get_forums_by_access_level",
            user_id=str(user_id),
            level=level.value,
        ):
            await self.user_service.get_user_by_id(user_id)
            grants = await self.access_repository.find_by_user(user_id, level=level)
            return await self._forums_of(grants)

    async def _forums_of(self, grants) -> list[Forum]:
        forums = []
        for grant in grants:
            forum = await self.forum_repository.find_by_id(grant.forum_id)
            if forum is not None:
                forums.append(forum)
        return forums
