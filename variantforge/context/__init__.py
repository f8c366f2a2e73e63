"""Settings and the override-aware Context they accumulate in."""

from variantforge.context.context import MISSING, Context, ContextItem
from variantforge.context.settings import (
    ENV,
    GLOBAL,
    KINDS,
    META,
    MODULE,
    SETTING_TYPES,
    EnvVar,
    GlobalVar,
    MetaInfo,
    ModuleUse,
    Setting,
    quote_value,
)

__all__ = [
    "Context",
    "ContextItem",
    "MISSING",
    "Setting",
    "EnvVar",
    "GlobalVar",
    "ModuleUse",
    "MetaInfo",
    "ENV",
    "GLOBAL",
    "MODULE",
    "META",
    "KINDS",
    "SETTING_TYPES",
    "quote_value",
]
