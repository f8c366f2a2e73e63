"""Context: an ordered, override-aware stack of settings.

A Context is an ordered list of items, each either a Setting or another
Context. Deriving a child never mutates the parent: ``new_child`` wraps
the parent as the first item of a new Context, so one parent can be
shared by every sibling branch of the combination tree.

Lookups scan from the most recently pushed item backwards and stop at the
first match, so a child's setting overrides the same (name, kind) in any
ancestor. Code generation walks the items in the same reverse order:
the most recently pushed setting is emitted first.

Example:
    >>> root = Context(EnvVar("MODE", "base"))
    >>> child = root.new_child(EnvVar("MODE", "fast"), GlobalVar("level", 2))
    >>> child.get_env_var("MODE")
    'fast'
    >>> root.get_env_var("MODE")
    'base'
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any, Union

from variantforge.context.settings import (
    ENV,
    GLOBAL,
    META,
    MODULE,
    EnvVar,
    GlobalVar,
    MetaInfo,
    ModuleUse,
    Setting,
)

ContextItem = Union[Setting, "Context"]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


class Context:
    """Ordered collection of settings and nested contexts."""

    __slots__ = ("_items",)

    def __init__(self, *items: ContextItem) -> None:
        self._items: list[ContextItem] = []
        for item in items:
            self.push(item)

    def push(self, item: ContextItem) -> None:
        """Append a setting or context.

        Only valid while building a context that no child has seen yet.
        """
        if not isinstance(item, (Setting, Context)):
            raise TypeError(f"Context items must be Setting or Context, got {type(item).__name__}")
        self._items.append(item)

    def new_child(self, *items: ContextItem) -> Context:
        """Return a new Context extending this one with ``items``."""
        return type(self)(self, *items)

    # -- factories: each wraps one setting in a fresh context ---------------

    @classmethod
    def new_env_var(cls, name: str, value: Any) -> Context:
        return cls(EnvVar(name, value))

    @classmethod
    def new_global_var(cls, name: str, value: Any) -> Context:
        return cls(GlobalVar(name, value))

    @classmethod
    def new_module_use(cls, name: str, args: Iterable[str] = ()) -> Context:
        return cls(ModuleUse(name, args))

    @classmethod
    def new_meta_info(cls, name: str, value: Any) -> Context:
        return cls(MetaInfo(name, value))

    # -- lookup -------------------------------------------------------------

    def lookup(self, name: str, kind: str | None) -> tuple[Any, bool]:
        """Find the most recent value for (name, kind).

        Returns:
            (value, True) on a match, (MISSING, False) otherwise. The flag
            distinguishes a setting whose value is None from no setting.
        """
        for item in reversed(self._items):
            if isinstance(item, Context):
                value, found = item.lookup(name, kind)
                if found:
                    return value, True
            elif item.matches(name, kind):
                return item.value, True
        return MISSING, False

    def get_var(self, name: str, kind: str | None, default: Any = None) -> Any:
        value, found = self.lookup(name, kind)
        return value if found else default

    def get_env_var(self, name: str, default: Any = None) -> Any:
        return self.get_var(name, ENV, default)

    def get_global_var(self, name: str, default: Any = None) -> Any:
        return self.get_var(name, GLOBAL, default)

    def get_module_use(self, name: str, default: Any = None) -> Any:
        return self.get_var(name, MODULE, default)

    def get_meta_info(self, name: str, default: Any = None) -> Any:
        return self.get_var(name, META, default)

    # -- serialization ------------------------------------------------------

    def get_code(self) -> str:
        """Render every item, most recently pushed first."""
        return "".join(item.get_code() if isinstance(item, Context) else item.render()
                       for item in reversed(self._items))

    def serialize(self) -> str:
        return self.get_code()

    def settings(self) -> list[Setting]:
        """All settings, flattened, in the order get_code() emits them."""
        flat: list[Setting] = []
        for item in reversed(self._items):
            if isinstance(item, Context):
                flat.extend(item.settings())
            else:
                flat.append(item)
        return flat

    def __iter__(self) -> Iterator[ContextItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Context({', '.join(repr(item) for item in self._items)})"
