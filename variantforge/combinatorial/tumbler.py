"""Recursive expansion of the variant combination tree.

The Tumbler walks an ordered list of dimensions depth-first. At each
level it asks the head dimension for its variants and, for every variant
name in sorted order, recurses into the remaining dimensions with:

- the path extended by the variant name
- a child context holding the variant's settings
- a deep copy of the payload, so siblings never see each other's edits

When no dimensions remain the consumer is called once for that leaf. A
dimension that returns no variants prunes its subtree: nothing below it
reaches the consumer.

Example:
    >>> leaves = []
    >>> tumbler = Tumbler(consumer=lambda path, ctx, payload: leaves.append(path))
    >>> tumbler.tumble(
    ...     [lambda p, c, t: {"a": None, "b": None}, lambda p, c, t: {"x": None}],
    ...     [], Context(), {},
    ... )
    2
    >>> leaves
    [['a', 'x'], ['b', 'x']]
"""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from variantforge.combinatorial.providers import DimensionCallable, Payload
from variantforge.context import Context, Setting
from variantforge.errors import ProviderError, VariantForgeError

logger = logging.getLogger(__name__)

Consumer = Callable[[list[str], Context, Payload], Any]


def default_add_path(path: list[str], name: str) -> list[str]:
    return [*path, name]


def escapes_directory(name: str) -> bool:
    """True if ``name``, joined onto a directory, would land outside it."""
    parts = name.replace("\\", "/").split("/")
    return os.path.isabs(name) or parts[0] == "" or ".." in parts


def default_add_context(context: Context, value: Any) -> Context:
    """Derive the child context for one variant value.

    Accepts a Setting, a Context, a list/tuple of them, or None (the
    variant adds no settings).
    """
    if value is None:
        return context.new_child()
    if isinstance(value, (Setting, Context)):
        return context.new_child(value)
    if isinstance(value, (list, tuple)):
        return context.new_child(*value)
    raise TypeError(
        f"Variant value must be a Setting, Context or a list of them, got {type(value).__name__}"
    )


def default_add_payload(payload: Payload, value: Any) -> Payload:
    return copy.deepcopy(payload)


@dataclass
class Tumbler:
    """Depth-first driver over an ordered list of dimensions.

    Attributes:
        consumer: Called as consumer(path, context, payload) at every leaf.
        add_path: Builds a child path from (path, variant_name).
        add_context: Builds a child context from (context, variant_value).
        add_payload: Builds a branch payload from (payload, variant_value).
    """

    consumer: Consumer
    add_path: Callable[[list[str], str], list[str]] = default_add_path
    add_context: Callable[[Context, Any], Context] = default_add_context
    add_payload: Callable[[Payload, Any], Payload] = default_add_payload

    def tumble(
        self,
        providers: Sequence[DimensionCallable],
        path: list[str],
        context: Context,
        payload: Payload,
    ) -> int:
        """Expand every combination below this node.

        Returns:
            The number of leaves handed to the consumer.

        Raises:
            ProviderError: If a dimension fails or returns something other
                than a mapping. The run is aborted.
        """
        if not providers:
            self.consumer(path, context, payload)
            return 1

        current, remaining = providers[0], providers[1:]
        variants = self._call_provider(current, path, context, payload)

        if not variants:
            logger.debug("No variants at %s, pruning", "/".join(path) or "<root>")
            return 0

        leaves = 0
        for name in sorted(variants):
            value = variants[name]
            try:
                child_context = self.add_context(context, value)
            except TypeError as e:
                raise ProviderError(str(e), variant_path=[*path, name], cause=e) from e
            leaves += self.tumble(
                remaining,
                self.add_path(path, name),
                child_context,
                self.add_payload(payload, value),
            )
        return leaves

    def _call_provider(
        self,
        provider: DimensionCallable,
        path: list[str],
        context: Context,
        payload: Payload,
    ) -> Mapping[str, Any]:
        try:
            variants = provider(path, context, payload)
        except VariantForgeError:
            raise
        except Exception as e:
            raise ProviderError(
                f"Variant provider {getattr(provider, 'name', None) or provider!r} failed: {e}",
                variant_path=path,
                cause=e,
            ) from e

        if variants is None:
            return {}
        if not isinstance(variants, Mapping):
            raise ProviderError(
                f"Variant provider {provider!r} returned {type(variants).__name__}, expected a mapping",
                variant_path=path,
            )
        for name in variants:
            if not isinstance(name, str) or not name:
                raise ProviderError(
                    f"Variant names must be non-empty strings, got {name!r}",
                    variant_path=path,
                )
            if escapes_directory(name):
                raise ProviderError(
                    f"Variant name {name!r} must be a relative path without '..'",
                    variant_path=path,
                )
        return variants
