"""Variant providers: one dimension of the combination tree.

A provider is called with the current variant path, context and payload
and returns a mapping of variant name -> variant value. Each value is
added to the context of the branch it names (a Setting, a Context, or a
list of them).

Provider objects may hook into three phases, run in this fixed order:

    provider_initial -> provider -> provider_final

Each phase is called as ``phase(path, context, payload, variants)`` where
``variants`` is the mapping accumulated so far for the dimension. A phase
may edit ``variants`` or ``payload`` in place, return a mapping to merge
(later entries win), or both. Objects implement only the phases they
need; an early phase lets a provider seed values others refine, and a
final phase can veto variants the others produced.

Example:
    >>> class Drivers(VariantProvider):
    ...     name = "drivers"
    ...
    ...     def provider(self, path, context, payload, variants):
    ...         return {
    ...             "sqlite": Context.new_env_var("DB_DRIVER", "sqlite"),
    ...             "pg": Context.new_env_var("DB_DRIVER", "pg"),
    ...         }
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterable, Mapping, MutableMapping, Sequence
from typing import TYPE_CHECKING, Any

from variantforge.context import Context
from variantforge.errors import ConfigurationError, ProviderError

if TYPE_CHECKING:
    from variantforge.plugins.loader import ProviderLoader
    from variantforge.plugins.registry import ProviderRegistry

logger = logging.getLogger(__name__)

PHASES = ("provider_initial", "provider", "provider_final")

Payload = MutableMapping[str, Any]
Variants = dict[str, Any]
DimensionCallable = Callable[[list[str], Context, Payload], Mapping[str, Any]]


def implemented_phases(obj: Any) -> list[str]:
    """Names of the phases ``obj`` implements, in run order."""
    phases = []
    for phase in PHASES:
        func = getattr(obj, phase, None)
        if func is None or not callable(func):
            continue
        # VariantProvider leaves unimplemented phases as the base stubs
        if getattr(func, "__isabstractphase__", False):
            continue
        phases.append(phase)
    return phases


def provider_name(obj: Any) -> str:
    name = getattr(obj, "name", None)
    if isinstance(name, str) and name:
        return name
    if inspect.ismodule(obj):
        return obj.__name__
    return getattr(obj, "__qualname__", type(obj).__name__)


def _run_phase(func: Callable[..., Any], path: list[str], context: Context,
               payload: Payload, variants: Variants) -> None:
    result = func(path, context, payload, variants)
    if result is None:
        return
    if not isinstance(result, Mapping):
        raise ProviderError(
            f"{getattr(func, '__qualname__', func)!s} returned {type(result).__name__}, "
            f"expected a mapping of variant names",
            variant_path=path,
        )
    variants.update(result)


def _phase_stub(func: Callable[..., Any]) -> Callable[..., Any]:
    func.__isabstractphase__ = True  # type: ignore[attr-defined]
    return func


class VariantProvider:
    """Base class for provider objects.

    Override any of ``provider_initial``, ``provider`` and
    ``provider_final``. Instances are callable as a single dimension.
    """

    name: str = ""
    description: str = ""

    @_phase_stub
    def provider_initial(self, path: list[str], context: Context, payload: Payload,
                         variants: Variants) -> Mapping[str, Any] | None:
        return None

    @_phase_stub
    def provider(self, path: list[str], context: Context, payload: Payload,
                 variants: Variants) -> Mapping[str, Any] | None:
        return None

    @_phase_stub
    def provider_final(self, path: list[str], context: Context, payload: Payload,
                       variants: Variants) -> Mapping[str, Any] | None:
        return None

    @property
    def phases(self) -> list[str]:
        return implemented_phases(self)

    def __call__(self, path: list[str], context: Context, payload: Payload) -> Variants:
        variants: Variants = {}
        for phase in self.phases:
            _run_phase(getattr(self, phase), path, context, payload, variants)
        return variants

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {provider_name(self)} phases={self.phases}>"


def _group_members(obj: Any) -> list[Any]:
    # a namespace module may publish its provider as a module-level object
    if inspect.ismodule(obj):
        published = getattr(obj, "provider", None)
        if isinstance(published, (VariantProvider, ProviderGroup)):
            obj = published
    if isinstance(obj, ProviderGroup):
        return list(obj.members)
    return [obj]


class ProviderGroup:
    """Several provider objects acting together as one dimension.

    Members are ordered by name. For each phase in turn, every member that
    implements it is called, all sharing one ``variants`` mapping. A module
    whose ``provider`` attribute is a VariantProvider (or ProviderGroup)
    contributes that object's phases instead of the module's.
    """

    def __init__(self, members: Iterable[Any], name: str = "") -> None:
        ordered = sorted(members, key=provider_name)
        self.name = name or ",".join(provider_name(m) for m in ordered)
        self.members = [member for obj in ordered for member in _group_members(obj)]

    def __call__(self, path: list[str], context: Context, payload: Payload) -> Variants:
        variants: Variants = {}
        for phase in PHASES:
            for member in self.members:
                if phase not in implemented_phases(member):
                    continue
                logger.debug("Running %s.%s at %s", provider_name(member), phase, "/".join(path))
                _run_phase(getattr(member, phase), path, context, payload, variants)
        return variants

    def __len__(self) -> int:
        return len(self.members)

    def __repr__(self) -> str:
        return f"<ProviderGroup {self.name} members={len(self.members)}>"


def _as_dimension(obj: Any, label: str) -> DimensionCallable:
    if isinstance(obj, (VariantProvider, ProviderGroup)):
        return obj
    if implemented_phases(obj):
        return ProviderGroup([obj], name=provider_name(obj))
    if callable(obj) and not inspect.isclass(obj):
        return obj
    raise ConfigurationError(
        f"Variant provider {label!r} is neither callable nor implements any of {', '.join(PHASES)}",
        field="variant_providers",
    )


def normalize_providers(
    providers: Sequence[Any],
    loader: ProviderLoader | None = None,
    registry: ProviderRegistry | None = None,
) -> list[DimensionCallable]:
    """Turn configured provider entries into dimension callables.

    Each entry may be:
    - a plain callable ``(path, context, payload) -> mapping``
    - a VariantProvider instance, or any object with phase methods
    - a list/tuple of such objects, combined into a ProviderGroup
    - a name registered in the ProviderRegistry
    - ``"package.module:attr"``, imported and treated as above
    - a package name, whose provider modules form a ProviderGroup
    """
    from variantforge.plugins.loader import ProviderLoader
    from variantforge.plugins.registry import get_registry

    loader = loader or ProviderLoader()
    registry = registry if registry is not None else get_registry()

    dimensions: list[DimensionCallable] = []
    for entry in providers:
        if isinstance(entry, str):
            if entry in registry:
                dimensions.append(_as_dimension(registry.get(entry), entry))
            elif ":" in entry:
                dimensions.append(_as_dimension(loader.load_object(entry), entry))
            else:
                modules = loader.load_namespace(entry)
                logger.info(
                    "Variant providers in %s: %s",
                    entry,
                    ", ".join(m.__name__[len(entry) + 1:] for m in modules) or "(none)",
                )
                dimensions.append(ProviderGroup(modules, name=entry))
        elif isinstance(entry, (list, tuple)):
            dimensions.append(ProviderGroup(entry))
        else:
            dimensions.append(_as_dimension(entry, repr(entry)))
    return dimensions
