"""Provider registry for the forum container.

``PROVIDERS`` lists every provider the container is assembled from, in
assembly order. Providers with subclasses are swappable components; the
subclass is picked by its ``__is_mock__`` flag.
"""

from typing import Type

from forum.util.di.base import Component, ProviderBase
from forum.util.di.core import ProdConfigProvider
from forum.util.di.domain import ProdDomainProvider
from forum.util.di.infrastructure import (
    PersistenceProvider,
    ProdPersistenceProvider,
    ProdStorageProvider,
    StorageProvider,
)

PROVIDERS: list[Type[ProviderBase]] = [
    ProdConfigProvider,
    ProdDomainProvider,
    PersistenceProvider,
    StorageProvider,
]


def is_swappable(provider: Type[ProviderBase]) -> bool:
    """Whether ``provider`` is a component base with concrete variants."""
    return bool(provider.__subclasses__())


def get_provider(
    base: Type[ProviderBase], use_mock: bool = False
) -> Type[ProviderBase]:
    """Resolve the provider class to install for ``base``.

    Args:
        base: Registered provider
        use_mock: Pick the in-memory variant of a swappable component

    Returns:
        ``base`` itself for fixed providers, otherwise the matching variant

    Raises:
        ValueError: If a swappable component has no variant of the wanted kind
    """
    if not is_swappable(base):
        return base

    for variant in base.__subclasses__():
        if getattr(variant, "__is_mock__", False) == use_mock:
            return variant

    wanted = "mock" if use_mock else "production"
    name = base.__mock_component__ or base.__name__
    raise ValueError(f"{name} has no {wanted} provider")


__all__ = [
    "Component",
    "PROVIDERS",
    "PersistenceProvider",
    "ProdConfigProvider",
    "ProdDomainProvider",
    "ProdPersistenceProvider",
    "ProdStorageProvider",
    "ProviderBase",
    "StorageProvider",
    "get_provider",
    "is_swappable",
]
