"""Settings: the named, typed declarations a Context is made of.

Each setting knows how to render itself as Python source for the
generated test script. The set of kinds is closed:

- EnvVar: set (or remove) a process environment variable
- GlobalVar: bind a module global in the generated script
- ModuleUse: import a module, optionally importing names from it
- MetaInfo: carries information between providers, renders nothing

Values are rendered with quote_value(), which sorts dict keys and set
members so identical inputs always produce byte-identical scripts.

Example:
    >>> EnvVar("DBI_DSN", "dbi:SQLite:").render()
    "import atexit\\nimport os\\nos.environ['DBI_DSN'] = 'dbi:SQLite:'\\n..."
"""

from __future__ import annotations

import keyword
import pprint
from dataclasses import dataclass
from typing import Any, ClassVar

ENV = "env"
GLOBAL = "global"
MODULE = "module"
META = "meta"

KINDS = (ENV, GLOBAL, MODULE, META)


def quote_value(value: Any) -> str:
    """Render a value as a deterministic Python literal."""
    return pprint.pformat(value, sort_dicts=True, width=100)


def _is_identifier(name: str) -> bool:
    return name.isidentifier() and not keyword.iskeyword(name)


@dataclass(frozen=True)
class Setting:
    """Base for a name/value/kind triple.

    Subclasses set ``kind`` and override ``render``.
    """

    kind: ClassVar[str] = ""

    name: str
    value: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"{type(self).__name__} name must be a non-empty string")

    def render(self) -> str:
        return ""

    def matches(self, name: str, kind: str | None = None) -> bool:
        """True if this setting answers a lookup for ``name`` of ``kind``."""
        if kind is not None and kind != self.kind:
            return False
        return name == self.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.value!r})"


@dataclass(frozen=True, repr=False)
class EnvVar(Setting):
    """A process environment variable.

    A value of None means the variable must not exist while the script
    runs; any prior value is restored on exit.
    """

    kind: ClassVar[str] = ENV

    def __post_init__(self) -> None:
        super().__post_init__()
        if "=" in self.name or "\0" in self.name:
            raise ValueError(f"Invalid environment variable name: {self.name!r}")

    def render(self) -> str:
        name = quote_value(self.name)
        lines = ["import atexit", "import os"]
        if self.value is not None:
            lines.append(f"os.environ[{name}] = {quote_value(str(self.value))}")
            lines.append(f"atexit.register(os.environ.pop, {name}, None)")
        else:
            lines.append(f"if {name} in os.environ:")
            lines.append(f"    atexit.register(os.environ.__setitem__, {name}, os.environ.pop({name}))")
        return "\n".join(lines) + "\n"


@dataclass(frozen=True, repr=False)
class GlobalVar(Setting):
    """A global binding in the generated script's ``__main__`` module.

    Test code reaches it with ``import __main__; __main__.NAME``.
    """

    kind: ClassVar[str] = GLOBAL

    def __post_init__(self) -> None:
        super().__post_init__()
        if not _is_identifier(self.name):
            raise ValueError(f"Global variable name must be an identifier: {self.name!r}")

    def render(self) -> str:
        return f"{self.name} = {quote_value(self.value)}\n"


@dataclass(frozen=True, repr=False)
class ModuleUse(Setting):
    """``import name``, or ``from name import a, b`` when args are given."""

    kind: ClassVar[str] = MODULE

    def __post_init__(self) -> None:
        super().__post_init__()
        if not all(_is_identifier(part) for part in self.name.split(".")):
            raise ValueError(f"Invalid module name: {self.name!r}")
        if isinstance(self.value, str):
            raise ValueError(
                f"Import names for {self.name} must be a list, got the string {self.value!r}"
            )
        args = () if self.value is None else tuple(self.value)
        for arg in args:
            if not isinstance(arg, str) or not _is_identifier(arg):
                raise ValueError(f"Import names for {self.name} must be identifiers, got {arg!r}")
        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "value", args)

    def render(self) -> str:
        if not self.value:
            return f"import {self.name}\n"
        return f"from {self.name} import {', '.join(self.value)}\n"


@dataclass(frozen=True, repr=False)
class MetaInfo(Setting):
    """Information passed between providers; never emitted."""

    kind: ClassVar[str] = META


SETTING_TYPES: dict[str, type[Setting]] = {
    ENV: EnvVar,
    GLOBAL: GlobalVar,
    MODULE: ModuleUse,
    META: MetaInfo,
}
