"""Provider discovery and registration."""

from variantforge.plugins.loader import ENTRY_POINT_GROUP, ProviderLoader
from variantforge.plugins.registry import (
    ProviderRegistry,
    get_registry,
    register_provider,
)


def reset_registry() -> None:
    """Drop the process-wide provider registry."""
    ProviderRegistry.reset_instance()


__all__ = [
    "ENTRY_POINT_GROUP",
    "ProviderLoader",
    "ProviderRegistry",
    "get_registry",
    "register_provider",
    "reset_registry",
]
