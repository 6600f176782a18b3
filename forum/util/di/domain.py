"""Domain layer DI providers."""

from dishka import Scope, provide

from forum.config import HierarchySettings, StorageSettings
from forum.domain.repository import (
    AccessRepository,
    CommentRepository,
    ContentRepository,
    ForumRepository,
    PostRepository,
    UserRepository,
)
from forum.domain.service import (
    AccessResolver,
    AdminGuard,
    CascadeCoordinator,
    CommentService,
    ContentService,
    ContentStore,
    ForumLockRegistry,
    HierarchyManager,
    PostService,
    UserService,
)
from forum.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped to align with repository/session
    lifecycle: one request scope is one transaction. The lock registry is
    the exception, it must be shared by every request in the process.
    """

    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    def get_lock_registry(self) -> ForumLockRegistry:
        """Provide the process-wide forum lock registry."""
        return ForumLockRegistry()

    @provide
    def get_user_service(self, user_repository: UserRepository) -> UserService:
        """Provide user directory service."""
        return UserService(user_repository=user_repository)

    @provide
    def get_access_resolver(
        self,
        forum_repository: ForumRepository,
        access_repository: AccessRepository,
        user_service: UserService,
        hierarchy_settings: HierarchySettings,
    ) -> AccessResolver:
        """Provide access resolver."""
        return AccessResolver(
            forum_repository=forum_repository,
            access_repository=access_repository,
            user_service=user_service,
            hierarchy_settings=hierarchy_settings,
        )

    @provide
    def get_admin_guard(
        self,
        access_repository: AccessRepository,
        forum_repository: ForumRepository,
        lock_registry: ForumLockRegistry,
    ) -> AdminGuard:
        """Provide last-admin guard."""
        return AdminGuard(
            access_repository=access_repository,
            forum_repository=forum_repository,
            lock_registry=lock_registry,
        )

    @provide
    def get_cascade_coordinator(
        self,
        post_repository: PostRepository,
        comment_repository: CommentRepository,
        content_repository: ContentRepository,
        content_store: ContentStore,
        access_resolver: AccessResolver,
    ) -> CascadeCoordinator:
        """Provide cascade deletion coordinator."""
        return CascadeCoordinator(
            post_repository=post_repository,
            comment_repository=comment_repository,
            content_repository=content_repository,
            content_store=content_store,
            access_resolver=access_resolver,
        )

    @provide
    def get_hierarchy_manager(
        self,
        forum_repository: ForumRepository,
        access_repository: AccessRepository,
        user_service: UserService,
        access_resolver: AccessResolver,
        admin_guard: AdminGuard,
        cascade_coordinator: CascadeCoordinator,
        lock_registry: ForumLockRegistry,
        hierarchy_settings: HierarchySettings,
    ) -> HierarchyManager:
        """Provide forum hierarchy manager."""
        return HierarchyManager(
            forum_repository=forum_repository,
            access_repository=access_repository,
            user_service=user_service,
            access_resolver=access_resolver,
            admin_guard=admin_guard,
            cascade_coordinator=cascade_coordinator,
            lock_registry=lock_registry,
            hierarchy_settings=hierarchy_settings,
        )

    @provide
    def get_post_service(
        self,
        post_repository: PostRepository,
        forum_repository: ForumRepository,
        access_resolver: AccessResolver,
    ) -> PostService:
        """Provide post domain service."""
        return PostService(
            post_repository=post_repository,
            forum_repository=forum_repository,
            access_resolver=access_resolver,
        )

    @provide
    def get_comment_service(
        self,
        comment_repository: CommentRepository,
        post_repository: PostRepository,
        access_resolver: AccessResolver,
    ) -> CommentService:
        """Provide comment domain service."""
        return CommentService(
            comment_repository=comment_repository,
            post_repository=post_repository,
            access_resolver=access_resolver,
        )

    @provide
    def get_content_service(
        self,
        content_repository: ContentRepository,
        post_repository: PostRepository,
        comment_repository: CommentRepository,
        content_store: ContentStore,
        access_resolver: AccessResolver,
        storage_settings: StorageSettings,
    ) -> ContentService:
        """Provide content attachment service."""
        return ContentService(
            content_repository=content_repository,
            post_repository=post_repository,
            comment_repository=comment_repository,
            content_store=content_store,
            access_resolver=access_resolver,
            storage_settings=storage_settings,
        )
