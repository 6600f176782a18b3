"""Domain services."""

from .access_resolver import AccessResolver
from .admin_guard import AdminGuard
from .base import Service
from .cascade_coordinator import CascadeCoordinator
from .comment_service import CommentService
from .content_service import ContentService
from .content_store import ContentStore
from .hierarchy_manager import HierarchyManager
from .locks import ForumLockRegistry
from .post_service import PostService
from .user_service import UserService

__all__ = [
    "AccessResolver",
    "AdminGuard",
    "CascadeCoordinator",
    "CommentService",
    "ContentService",
    "ContentStore",
    "ForumLockRegistry",
    "HierarchyManager",
    "PostService",
    "Service",
    "UserService",
]
