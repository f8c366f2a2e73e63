"""Registry of named variant providers."""

from __future__ import annotations

from typing import Any


class ProviderRegistry:
    """Explicit name -> provider registry, populated by the caller at startup.

    Registered names can be used anywhere a provider entry is accepted,
    e.g. ``variant_providers: [drivers, locales]`` in the config file.
    """

    _instance: ProviderRegistry | None = None

    def __new__(cls) -> ProviderRegistry:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._providers: dict[str, Any] = {}
        return cls._instance

    def register(self, name: str, provider: Any) -> None:
        if name in self._providers:
            raise ValueError(f"Provider '{name}' is already registered")
        self._providers[name] = provider

    def unregister(self, name: str) -> None:
        self._providers.pop(name, None)

    def get(self, name: str) -> Any | None:
        return self._providers.get(name)

    def get_all(self) -> dict[str, Any]:
        return dict(self._providers)

    def names(self) -> list[str]:
        return sorted(self._providers)

    def clear(self) -> None:
        self._providers.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    @classmethod
    def reset_instance(cls) -> None:
        cls._instance = None


def get_registry() -> ProviderRegistry:
    return ProviderRegistry()


def register_provider(name: str) -> Any:
    """Decorator registering a provider object or factory result under ``name``.

    Usage:
        @register_provider("drivers")
        class Drivers(VariantProvider):
            ...

    Classes are instantiated on registration; anything else is stored as is.
    """

    def decorator(obj: Any) -> Any:
        get_registry().register(name, obj() if isinstance(obj, type) else obj)
        return obj

    return decorator
