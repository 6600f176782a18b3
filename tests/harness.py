"""Fixture factory for container-backed tests.

Integration environments talk to the PostgreSQL named by ``DATABASE__*``
environment variables and expect the schema to be migrated.
"""

import pytest_asyncio

from forum.util.di import Component
from tests.di import build_test_container


def create_env_fixture(unmock: set[Component] | None = None):
    """Make a fixture yielding a request-scoped container.

    ``unit_env = create_env_fixture()`` keeps every component in memory;
    ``create_env_fixture(unmock={"persistence"})`` runs against Postgres.
    Services come out of the container with ``await env.get(Service)``.
    """

    @pytest_asyncio.fixture
    async def _env():
        container = build_test_container(unmock=unmock)
        async with container() as scoped:
            yield scoped
        await container.close()

    return _env
