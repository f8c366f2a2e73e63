"""Configuration management for variantforge."""

from variantforge.config.loader import (
    DEFAULT_CONFIG_FILES,
    collect_input_tests,
    find_config_file,
    interpolate_env_vars,
    load_config,
)
from variantforge.config.settings import GeneratorConfig

__all__ = [
    "GeneratorConfig",
    "load_config",
    "find_config_file",
    "interpolate_env_vars",
    "collect_input_tests",
    "DEFAULT_CONFIG_FILES",
]
