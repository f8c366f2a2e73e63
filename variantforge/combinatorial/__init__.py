"""Combinatorial expansion of variant dimensions.

Dimensions (variant providers) are walked in order; every combination of
their variants becomes one leaf of the tree, carrying the Context built
along its path and its own copy of the payload.

Modules:
    providers: VariantProvider, ProviderGroup, normalize_providers
    tumbler: Tumbler

Quick Start:
    >>> from variantforge.combinatorial import Tumbler
    >>> from variantforge.context import Context
    >>>
    >>> def versions(path, context, payload):
    ...     return {v: Context.new_env_var("LIB_VERSION", v) for v in ("1.0", "2.0")}
    >>>
    >>> tumbler = Tumbler(consumer=lambda path, ctx, payload: print(path, ctx.get_env_var("LIB_VERSION")))
    >>> tumbler.tumble([versions], [], Context(), {"smoke": {}})
    ['1.0'] 1.0
    ['2.0'] 2.0
    2
"""

from variantforge.combinatorial.providers import (
    PHASES,
    DimensionCallable,
    Payload,
    ProviderGroup,
    VariantProvider,
    Variants,
    implemented_phases,
    normalize_providers,
    provider_name,
)
from variantforge.combinatorial.tumbler import (
    Consumer,
    Tumbler,
    default_add_context,
    default_add_path,
    default_add_payload,
    escapes_directory,
)

__all__ = [
    # Providers
    "PHASES",
    "DimensionCallable",
    "Payload",
    "Variants",
    "VariantProvider",
    "ProviderGroup",
    "implemented_phases",
    "normalize_providers",
    "provider_name",
    # Tumbler
    "Consumer",
    "Tumbler",
    "default_add_path",
    "default_add_context",
    "default_add_payload",
    "escapes_directory",
]
