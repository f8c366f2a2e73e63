"""Provider discovery for variantforge.

Providers can come from:
- A package namespace: every submodule implementing one of the phase
  functions (provider_initial, provider, provider_final) joins that
  dimension
- An explicit object path: "package.module:attr"
- Python entry points: the "variantforge.providers" group, registered by name

Example:
    >>> from variantforge.plugins.loader import ProviderLoader
    >>>
    >>> loader = ProviderLoader()
    >>> for module in loader.load_namespace("myproject.variants.driver"):
    ...     print(module.__name__)

Unlike optional plugins, a provider that fails to import is fatal: a
dimension silently missing a member would generate an incomplete tree.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from importlib.metadata import entry_points
from types import ModuleType
from typing import TYPE_CHECKING, Any

from variantforge.combinatorial.providers import implemented_phases
from variantforge.errors import ProviderLoadError

if TYPE_CHECKING:
    from variantforge.plugins.registry import ProviderRegistry

logger = logging.getLogger(__name__)

# Entry point group for installable providers
ENTRY_POINT_GROUP = "variantforge.providers"


class ProviderLoader:
    """Finds and imports provider modules and objects."""

    def __init__(self) -> None:
        self._loaded: dict[str, ModuleType] = {}

    def _import(self, module_name: str) -> ModuleType:
        if module_name in self._loaded:
            return self._loaded[module_name]
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ProviderLoadError(module_name, "Module not found", e) from e
        except Exception as e:
            raise ProviderLoadError(module_name, "Failed to import module", e) from e
        self._loaded[module_name] = module
        return module

    def iter_module_names(self, namespace: str) -> list[str]:
        """List every plain module below ``namespace``, sorted.

        Subpackages are imported to find their children but are not listed
        themselves; leaf modules are not imported.
        """
        package = self._import(namespace)
        search_path = getattr(package, "__path__", None)
        if search_path is None:
            raise ProviderLoadError(namespace, "Not a package, has no submodules to search")

        def onerror(name: str) -> None:
            raise ProviderLoadError(name, "Failed to import package while searching")

        names = [
            info.name
            for info in pkgutil.walk_packages(search_path, prefix=f"{namespace}.", onerror=onerror)
            if not info.ispkg
        ]
        return sorted(names)

    def load_namespace(self, namespace: str) -> list[ModuleType]:
        """Import the provider modules found below ``namespace``.

        Returns:
            Modules implementing at least one phase function, sorted by name.
        """
        modules = []
        for module_name in self.iter_module_names(namespace):
            module = self._import(module_name)
            if implemented_phases(module):
                modules.append(module)
            else:
                logger.debug("Skipping %s: no provider phases", module_name)
        return modules

    def load_object(self, spec: str) -> Any:
        """Import ``"package.module:attr.sub"`` and return the attribute."""
        module_name, _, attr_path = spec.partition(":")
        if not module_name or not attr_path:
            raise ProviderLoadError(spec, "Expected 'package.module:attribute'")

        obj: Any = self._import(module_name)
        for attr in attr_path.split("."):
            try:
                obj = getattr(obj, attr)
            except AttributeError as e:
                raise ProviderLoadError(spec, f"No attribute '{attr}'", e) from e

        if isinstance(obj, type):
            obj = obj()
        return obj

    def discover_entry_points(self, registry: ProviderRegistry | None = None) -> list[str]:
        """Register providers published under the entry point group.

        Returns:
            Names registered, sorted.
        """
        from variantforge.plugins.registry import get_registry

        registry = registry if registry is not None else get_registry()
        names = []
        for ep in sorted(entry_points(group=ENTRY_POINT_GROUP), key=lambda ep: ep.name):
            try:
                provider = ep.load()
            except Exception as e:
                raise ProviderLoadError(ep.name, "Failed to load entry point", e) from e
            if isinstance(provider, type):
                provider = provider()
            if ep.name not in registry:
                registry.register(ep.name, provider)
                logger.info("Registered provider %s from entry point %s", ep.name, ep.value)
            names.append(ep.name)
        return names
