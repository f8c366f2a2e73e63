"""Configuration loading: YAML file, environment interpolation, CLI overrides.

Priority: CLI overrides > config file > VARIANTFORGE_* env vars > defaults

String values in the file may reference environment variables as
``${NAME}`` or ``${NAME:default}``.

Example variantforge.yaml:

    output_dir: t/generated
    variant_providers:
      - myproject.variants.driver
      - myproject.variants.locale
    test_search_path:
      - myproject.testcases
    input_tests:
      smoke:
        code: "assert True"
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from variantforge.config.settings import GeneratorConfig
from variantforge.errors import ConfigurationError
from variantforge.writer.entries import TestPayload, add_test

if TYPE_CHECKING:
    from variantforge.writer import VariantWriter

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]*))?\}")

# Fields resolved relative to the config file's directory
PATH_FIELDS = ("output_dir", "test_files_dir")

DEFAULT_CONFIG_FILES = ("variantforge.yaml", "variantforge.yml")


def find_config_file(base_dir: str | Path | None = None) -> Path | None:
    """Return the first default config file present in ``base_dir`` (cwd by default)."""
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    for name in DEFAULT_CONFIG_FILES:
        candidate = base / name
        if candidate.is_file():
            return candidate
    return None


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            suggestions=[
                "Create a variantforge.yaml file in your project root",
                "Specify a different config path with --config",
            ],
        )

    try:
        with open(path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse YAML configuration: {e}", cause=e) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Configuration must be a YAML mapping, got {type(config).__name__}"
        )
    return config


def interpolate_env_vars(value: Any) -> Any:
    """Recursively replace ${NAME} / ${NAME:default} in strings."""
    if isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    if isinstance(value, str):
        return ENV_VAR_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ""), value)
    return value


def _resolve_relative_paths(config: dict[str, Any], base_dir: Path) -> dict[str, Any]:
    for field in PATH_FIELDS:
        value = config.get(field)
        if isinstance(value, str) and value and not Path(value).is_absolute():
            config[field] = str(base_dir / value)
    return config


def load_config(config_path: str | Path | None = None, **overrides: Any) -> GeneratorConfig:
    """Load configuration from file, environment and explicit overrides.

    Overrides whose value is None are ignored, so CLI options that were not
    given fall back to the file.

    Raises:
        ConfigurationError: The file is missing or malformed, contains
            unknown keys, or a value fails validation.
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        config_data = interpolate_env_vars(_load_yaml(path))
        config_data = _resolve_relative_paths(config_data, path.parent)

    unknown = sorted(set(config_data) - set(GeneratorConfig.model_fields))
    if unknown:
        raise ConfigurationError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            field=unknown[0],
        )

    config_data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return GeneratorConfig(**config_data)
    except ValidationError as e:
        first = e.errors()[0]
        raise ConfigurationError(
            f"Invalid configuration: {first['msg']}",
            field=".".join(str(part) for part in first["loc"]) or None,
            cause=e,
        ) from e


def collect_input_tests(config: GeneratorConfig, writer: VariantWriter) -> TestPayload:
    """Build the payload from every test source the configuration names.

    Raises:
        DuplicateTestNameError: Two sources produce the same test name.
    """
    input_tests: TestPayload = {}

    for name in sorted(config.input_tests):
        add_test(input_tests, name, config.input_tests[name])

    if config.test_search_path:
        writer.find_input_test_modules(
            search_path=config.test_search_path,
            test_prefix=config.test_prefix,
            input_tests=input_tests,
        )

    if config.test_files_dir:
        writer.find_input_test_files(config.test_files_dir, input_tests=input_tests)

    return input_tests
