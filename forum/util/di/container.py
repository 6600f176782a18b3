"""Dependency injection container."""

from dishka import AsyncContainer, make_async_container

from forum.config import Settings
from forum.util.di import PROVIDERS, get_provider
from forum.util.logging import setup_logging
from forum.util.observability import configure_logfire


def create_container() -> AsyncContainer:
    """Build production container (all prod implementations).

    Settings are loaded from environment variables automatically. Run each
    engine operation in its own request scope::

        async with container() as request:
            manager = await request.get(HierarchyManager)
            await manager.move_forum(forum_id, new_parent_id, acting_user_id)

    Returns:
        Configured DI container with production providers
    """
    provider_instances = [get_provider(base, use_mock=False)() for base in PROVIDERS]
    return make_async_container(*provider_instances)


def bootstrap() -> AsyncContainer:
    """Configure logging and Logfire, then build the production container.

    Call once at process start, before any engine operation runs.
    """
    settings = Settings()
    setup_logging(settings)
    configure_logfire(settings)
    return create_container()
