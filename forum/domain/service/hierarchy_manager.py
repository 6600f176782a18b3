"""Forum tree and access grant management."""

import logfire
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator
from uuid import uuid4

from pydantic import ValidationError as PydanticValidationError

from forum.config import HierarchySettings
from forum.domain.error import (
    BusinessRuleViolationError,
    DuplicateResourceError,
    NotFoundError,
    ValidationError,
)
from forum.domain.model.access import AccessGrant
from forum.domain.model.forum import Forum
from forum.domain.repository import AccessRepository, ForumRepository
from forum.domain.value import AccessGrantId, AccessLevel, ForumId, ForumName, UserId

from .access_resolver import AccessResolver
from .admin_guard import AdminGuard
from .base import Service
from .cascade_coordinator import CascadeCoordinator
from .locks import ForumLockRegistry
from .user_service import UserService


class HierarchyManager(Service):
    """Domain service for forum tree mutations and access grants.

    Every structural change (create, rename, move, delete) runs under the
    tree lock so sibling-name and cycle checks see a stable tree. Grant
    changes run under the forum's exclusive lock held by the admin guard.
    """

    def __init__(
        self,
        forum_repository: ForumRepository,
        access_repository: AccessRepository,
        user_service: UserService,
        access_resolver: AccessResolver,
        admin_guard: AdminGuard,
        cascade_coordinator: CascadeCoordinator,
        lock_registry: ForumLockRegistry,
        hierarchy_settings: HierarchySettings,
    ) -> None:
        """Initialize hierarchy manager.

        Args:
            forum_repository: Forum repository
            access_repository: Access grant repository
            user_service: User directory
            access_resolver: Access resolution
            admin_guard: Last-admin guard
            cascade_coordinator: Cascading post deletion for forum removal
            lock_registry: Process-wide lock registry
            hierarchy_settings: Tree limits
        """
        self.forum_repository = forum_repository
        self.access_repository = access_repository
        self.user_service = user_service
        self.access_resolver = access_resolver
        self.admin_guard = admin_guard
        self.cascade_coordinator = cascade_coordinator
        self.lock_registry = lock_registry
        self.max_depth = hierarchy_settings.max_depth

    async def get_forum_by_id(self, forum_id: ForumId) -> Forum:
        """Get a forum by ID.

        Raises:
            NotFoundError: If the forum does not exist
        """
        forum = await self.forum_repository.find_by_id(forum_id)
        if forum is None:
            logfire.warn("Forum not found", forum_id=str(forum_id))
            raise NotFoundError("Forum", str(forum_id))
        return forum

    async def get_root_forums(self) -> list[Forum]:
        """Get all top-level forums, ordered by name."""
        return await self.forum_repository.find_roots()

    async def get_subforums(self, parent_id: ForumId) -> list[Forum]:
        """Get the direct children of a forum.

        Raises:
            NotFoundError: If the parent does not exist
        """
        await self.get_forum_by_id(parent_id)
        return await self.forum_repository.find_children(parent_id)

    async def search_forums(self, term: str) -> list[Forum]:
        """Find forums whose name contains ``term``, ignoring case.

        Raises:
            ValidationError: If the term is blank
        """
        term = term.strip()
        if not term:
            raise ValidationError("Search term cannot be empty")
        with logfire.span("hierarchy_manager.search_forums", term=term):
            forums = await self.forum_repository.search_by_name(term)
            logfire.info("Forums searched", term=term, count=len(forums))
            return forums

    async def list_grants(
        self, forum_id: ForumId, acting_user_id: UserId
    ) -> list[AccessGrant]:
        """List the direct grants on a forum. Requires ADMIN.

        Raises:
            NotFoundError: If the forum does not exist
            AccessDeniedError: If the acting user is not an admin of the forum
        """
        await self.get_forum_by_id(forum_id)
        await self.access_resolver.require_access(
            forum_id, acting_user_id, AccessLevel.ADMIN, "list grants of"
        )
        return await self.access_repository.find_by_forum(forum_id)

    async def create_forum(
        self, name: str, description: str | None, creator_id: UserId
    ) -> Forum:
        """Create a root forum and make its creator an administrator.

        Args:
            name: Forum name
            description: Optional description
            creator_id: User creating the forum

        Returns:
            Created forum

        Raises:
            ValidationError: If the name is blank or too long
            NotFoundError: If the creator does not exist
            DuplicateResourceError: If a root forum with that name exists
        """
        with logfire.span(
            "hierarchy_manager.create_forum", name=name, creator_id=str(creator_id)
        ):
            forum_name = self._parse_name(name)
            await self.user_service.get_user_by_id(creator_id)

            async with self._tree_exclusive():
                await self._ensure_unique_sibling(None, forum_name)
                forum = await self._insert_forum(
                    forum_name, description, None, creator_id
                )

            logfire.info(
                "Forum created",
                forum_id=str(forum.id),
                name=forum.name.root,
                creator_id=str(creator_id),
            )
            return forum

    async def create_subforum(
        self,
        name: str,
        description: str | None,
        parent_id: ForumId,
        creator_id: UserId,
    ) -> Forum:
        """Create a child forum. Requires ADMIN on the parent.

        Raises:
            ValidationError: If the name is blank or too long
            NotFoundError: If the parent or the creator does not exist
            AccessDeniedError: If the creator is not an admin of the parent
            DuplicateResourceError: If the parent already has a child of that name
            BusinessRuleViolationError: If the new forum would be too deep
        """
        with logfire.span(
            "hierarchy_manager.create_subforum",
            name=name,
            parent_id=str(parent_id),
            creator_id=str(creator_id),
        ):
            forum_name = self._parse_name(name)
            await self.user_service.get_user_by_id(creator_id)

            async with self._tree_exclusive():
                await self.get_forum_by_id(parent_id)
                await self.access_resolver.require_access(
                    parent_id, creator_id, AccessLevel.ADMIN, "create subforum in"
                )
                await self._ensure_unique_sibling(parent_id, forum_name)

                depth = len(await self.access_resolver.lineage(parent_id)) + 1
                if depth > self.max_depth:
                    raise BusinessRuleViolationError(
                        f"Forum tree cannot be deeper than {self.max_depth} levels"
                    )

                forum = await self._insert_forum(
                    forum_name, description, parent_id, creator_id
                )

            logfire.info(
                "Subforum created",
                forum_id=str(forum.id),
                parent_id=str(parent_id),
                name=forum.name.root,
                depth=depth,
            )
            return forum

    async def update_forum(
        self,
        forum_id: ForumId,
        acting_user_id: UserId,
        name: str | None = None,
        description: str | None = None,
    ) -> Forum:
        """Rename a forum and/or change its description. Requires ADMIN.

        Only supplied fields are applied.

        Raises:
            ValidationError: If the new name is blank or too long
            NotFoundError: If the forum does not exist
            AccessDeniedError: If the acting user is not an admin of the forum
            DuplicateResourceError: If a sibling already carries the new name
        """
        with logfire.span(
            "hierarchy_manager.update_forum",
            forum_id=str(forum_id),
            acting_user_id=str(acting_user_id),
            rename=name is not None,
        ):
            new_name = self._parse_name(name) if name is not None else None

            async with self._tree_exclusive():
                forum = await self.get_forum_by_id(forum_id)
                await self.access_resolver.require_access(
                    forum_id, acting_user_id, AccessLevel.ADMIN, "update"
                )

                changes: dict = {}
                if new_name is not None and new_name.root != forum.name.root:
                    await self._ensure_unique_sibling(
                        forum.parent_id, new_name, exclude_id=forum_id
                    )
                    changes["name"] = new_name
                if description is not None:
                    changes["description"] = description

                if not changes:
                    return forum

                changes["updated_at"] = datetime.now()
                saved = await self.forum_repository.save(forum.model_copy(update=changes))

            logfire.info(
                "Forum updated",
                forum_id=str(forum_id),
                fields=sorted(k for k in changes if k != "updated_at"),
            )
            return saved

    async def delete_forum(self, forum_id: ForumId, acting_user_id: UserId) -> None:
        """Delete a leaf forum with its posts and grants. Requires ADMIN.

        Raises:
            NotFoundError: If the forum does not exist
            AccessDeniedError: If the acting user is not an admin of the forum
            BusinessRuleViolationError: If the forum still has subforums
        """
        with logfire.span(
            "hierarchy_manager.delete_forum",
            forum_id=str(forum_id),
            acting_user_id=str(acting_user_id),
        ):
            async with self._tree_exclusive():
                await self.get_forum_by_id(forum_id)
                await self.access_resolver.require_access(
                    forum_id, acting_user_id, AccessLevel.ADMIN, "delete"
                )

                if await self.forum_repository.has_children(forum_id):
                    logfire.warn(
                        "Refused to delete forum with subforums",
                        forum_id=str(forum_id),
                    )
                    raise BusinessRuleViolationError(
                        "Cannot delete a forum that has subforums; delete subforums first"
                    )

                async with self.admin_guard.exclusive(forum_id):
                    posts = await self.cascade_coordinator.delete_forum_posts(forum_id)
                    grants = await self.access_repository.delete_by_forum(forum_id)
                    await self.forum_repository.delete(forum_id)

            logfire.info(
                "Forum deleted",
                forum_id=str(forum_id),
                posts_removed=posts,
                grants_removed=grants,
            )

    async def move_forum(
        self,
        forum_id: ForumId,
        new_parent_id: ForumId | None,
        acting_user_id: UserId,
    ) -> Forum:
        """Reparent a forum, or make it a root with ``new_parent_id`` None.

        Requires ADMIN on the forum and, when given, on the destination.

        Raises:
            NotFoundError: If the forum or the destination does not exist
            AccessDeniedError: If the acting user lacks ADMIN on either side
            DuplicateResourceError: If the destination already has a child
                (or, for roots, a root) with the same name
            BusinessRuleViolationError: If the destination is the forum
                itself or one of its descendants, or the moved subtree
                would end up too deep
        """
        with logfire.span(
            "hierarchy_manager.move_forum",
            forum_id=str(forum_id),
            new_parent_id=str(new_parent_id) if new_parent_id else None,
            acting_user_id=str(acting_user_id),
        ):
            async with self._tree_exclusive():
                forum = await self.get_forum_by_id(forum_id)
                await self.access_resolver.require_access(
                    forum_id, acting_user_id, AccessLevel.ADMIN, "move"
                )

                if new_parent_id is None:
                    await self._ensure_unique_sibling(
                        None, forum.name, exclude_id=forum_id
                    )
                else:
                    await self._check_destination(forum, new_parent_id, acting_user_id)

                if forum.parent_id == new_parent_id:
                    return forum

                moved = forum.model_copy(
                    update={"parent_id": new_parent_id, "updated_at": datetime.now()}
                )
                saved = await self.forum_repository.save(moved)

            logfire.info(
                "Forum moved",
                forum_id=str(forum_id),
                old_parent_id=str(forum.parent_id) if forum.parent_id else None,
                new_parent_id=str(new_parent_id) if new_parent_id else None,
            )
            return saved

    async def _check_destination(
        self, forum: Forum, new_parent_id: ForumId, acting_user_id: UserId
    ) -> None:
        if new_parent_id == forum.id:
            raise BusinessRuleViolationError("Cannot move a forum under itself")

        await self.get_forum_by_id(new_parent_id)
        await self.access_resolver.require_access(
            new_parent_id, acting_user_id, AccessLevel.ADMIN, "move forum into"
        )
        await self._ensure_unique_sibling(new_parent_id, forum.name, exclude_id=forum.id)

        destination_lineage = await self.access_resolver.lineage(new_parent_id)
        if any(ancestor.id == forum.id for ancestor in destination_lineage):
            logfire.warn(
                "Refused to move forum under its own descendant",
                forum_id=str(forum.id),
                new_parent_id=str(new_parent_id),
            )
            raise BusinessRuleViolationError(
                "Cannot move a forum under its own descendant"
            )

        depth = len(destination_lineage) + await self._subtree_height(forum.id)
        if depth > self.max_depth:
            raise BusinessRuleViolationError(
                f"Forum tree cannot be deeper than {self.max_depth} levels"
            )

    async def _subtree_height(self, forum_id: ForumId) -> int:
        """Number of levels in the subtree rooted at ``forum_id`` (itself is 1)."""
        height = 0
        seen: set[ForumId] = set()
        frontier = [forum_id]
        while frontier:
            height += 1
            if height > self.max_depth:
                break
            seen.update(frontier)
            next_frontier = []
            for parent_id in frontier:
                for child in await self.forum_repository.find_children(parent_id):
                    if child.id not in seen:
                        next_frontier.append(child.id)
            frontier = next_frontier
        return height

    async def grant_access(
        self,
        forum_id: ForumId,
        target_user_id: UserId,
        level: AccessLevel,
        acting_user_id: UserId,
    ) -> AccessGrant:
        """Give a user a level on a forum, replacing any existing grant.

        Raises:
            NotFoundError: If the forum or the target user does not exist
            AccessDeniedError: If the acting user is not an admin of the forum
            LastAdminError: If this would downgrade the forum's last admin
        """
        with logfire.span(
            "hierarchy_manager.grant_access",
            forum_id=str(forum_id),
            target_user_id=str(target_user_id),
            level=level.value,
            acting_user_id=str(acting_user_id),
        ):
            await self._ensure_grant_targets(forum_id, target_user_id)

            async with self.admin_guard.exclusive(forum_id):
                await self._require_admin(forum_id, acting_user_id)
                existing = await self.access_repository.find(target_user_id, forum_id)
                if existing is None:
                    grant = AccessGrant(
                        id=AccessGrantId(uuid4()),
                        user_id=target_user_id,
                        forum_id=forum_id,
                        level=level,
                        granted_at=datetime.now(),
                        updated_at=datetime.now(),
                    )
                    saved = await self.access_repository.save(grant)
                elif existing.level == level:
                    saved = existing
                else:
                    await self.admin_guard.ensure_can_revoke_or_downgrade(
                        forum_id, target_user_id, level
                    )
                    saved = await self.access_repository.save(
                        existing.model_copy(
                            update={"level": level, "updated_at": datetime.now()}
                        )
                    )

            logfire.info(
                "Access granted",
                forum_id=str(forum_id),
                target_user_id=str(target_user_id),
                level=level.value,
                replaced=existing is not None,
            )
            return saved

    async def update_access(
        self,
        forum_id: ForumId,
        target_user_id: UserId,
        level: AccessLevel,
        acting_user_id: UserId,
    ) -> AccessGrant:
        """Change the level of an existing grant.

        Raises:
            NotFoundError: If the forum, the target user or the grant does not exist
            AccessDeniedError: If the acting user is not an admin of the forum
            LastAdminError: If this would downgrade the forum's last admin
        """
        with logfire.span(
            "hierarchy_manager.update_access",
            forum_id=str(forum_id),
            target_user_id=str(target_user_id),
            level=level.value,
            acting_user_id=str(acting_user_id),
        ):
            await self._ensure_grant_targets(forum_id, target_user_id)

            async with self.admin_guard.exclusive(forum_id):
                await self._require_admin(forum_id, acting_user_id)
                existing = await self.access_repository.find(target_user_id, forum_id)
                if existing is None:
                    raise NotFoundError(
                        "AccessGrant", f"user={target_user_id} forum={forum_id}"
                    )
                await self.admin_guard.ensure_can_revoke_or_downgrade(
                    forum_id, target_user_id, level
                )
                saved = await self.access_repository.save(
                    existing.model_copy(
                        update={"level": level, "updated_at": datetime.now()}
                    )
                )

            logfire.info(
                "Access updated",
                forum_id=str(forum_id),
                target_user_id=str(target_user_id),
                old_level=existing.level.value,
                new_level=level.value,
            )
            return saved

    async def revoke_access(
        self,
        forum_id: ForumId,
        target_user_id: UserId,
        acting_user_id: UserId,
    ) -> bool:
        """Remove a user's direct grant on a forum.

        Returns:
            True if a grant was removed, False if the user held none

        Raises:
            NotFoundError: If the forum or the target user does not exist
            AccessDeniedError: If the acting user is not an admin of the forum
            LastAdminError: If the grant is the forum's last ADMIN grant
        """
        with logfire.span(
            "hierarchy_manager.revoke_access",
            forum_id=str(forum_id),
            target_user_id=str(target_user_id),
            acting_user_id=str(acting_user_id),
        ):
            await self._ensure_grant_targets(forum_id, target_user_id)

            async with self.admin_guard.exclusive(forum_id):
                await self._require_admin(forum_id, acting_user_id)
                existing = await self.access_repository.find(target_user_id, forum_id)
                if existing is None:
                    logfire.info(
                        "No grant to revoke",
                        forum_id=str(forum_id),
                        target_user_id=str(target_user_id),
                    )
                    return False
                await self.admin_guard.ensure_can_revoke_or_downgrade(
                    forum_id, target_user_id, None
                )
                removed = await self.access_repository.delete(target_user_id, forum_id)

            logfire.info(
                "Access revoked",
                forum_id=str(forum_id),
                target_user_id=str(target_user_id),
                level=existing.level.value,
            )
            return removed

    async def _ensure_grant_targets(
        self, forum_id: ForumId, target_user_id: UserId
    ) -> None:
        await self.get_forum_by_id(forum_id)
        await self.user_service.get_user_by_id(target_user_id)

    async def _require_admin(self, forum_id: ForumId, acting_user_id: UserId) -> None:
        # Caller holds exclusive(forum_id)
        await self.access_resolver.require_access(
            forum_id, acting_user_id, AccessLevel.ADMIN, "manage access to"
        )

    @asynccontextmanager
    async def _tree_exclusive(self) -> AsyncIterator[None]:
        async with self.lock_registry.tree:
            await self.forum_repository.lock_tree()
            yield

    @staticmethod
    def _parse_name(name: str) -> ForumName:
        try:
            return ForumName(name)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid forum name: {name!r}") from e

    async def _ensure_unique_sibling(
        self,
        parent_id: ForumId | None,
        name: ForumName,
        exclude_id: ForumId | None = None,
    ) -> None:
        clash = await self.forum_repository.find_sibling_by_name(
            parent_id, name.root, exclude_id=exclude_id
        )
        if clash is not None:
            logfire.warn(
                "Duplicate forum name",
                name=name.root,
                parent_id=str(parent_id) if parent_id else None,
                existing_forum_id=str(clash.id),
            )
            raise DuplicateResourceError("Forum", "name", name.root)

    async def _insert_forum(
        self,
        name: ForumName,
        description: str | None,
        parent_id: ForumId | None,
        creator_id: UserId,
    ) -> Forum:
        now = datetime.now()
        forum = await self.forum_repository.save(
            Forum(
                id=ForumId(uuid4()),
                name=name,
                description=description,
                parent_id=parent_id,
                created_at=now,
                updated_at=now,
            )
        )
        await self.access_repository.save(
            AccessGrant(
                id=AccessGrantId(uuid4()),
                user_id=creator_id,
                forum_id=forum.id,
                level=AccessLevel.ADMIN,
                granted_at=now,
                updated_at=now,
            )
        )
        return forum
