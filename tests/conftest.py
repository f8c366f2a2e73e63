"""Pytest fixtures for variantforge tests."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import pytest

from variantforge.context import Context
from variantforge.observability import ROOT_LOGGER
from variantforge.plugins import reset_registry
from variantforge.writer import TestEntry, TestPayload, VariantWriter

# The sample_variants / sample_cases fixture packages live beside this file
_tests_dir = str(Path(__file__).parent)
if _tests_dir not in sys.path:
    sys.path.insert(0, _tests_dir)


def _reset_logger() -> None:
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def make_env_dimension(var_name: str, names: Iterable[str]) -> Callable[..., dict[str, Any]]:
    """A dimension setting ``var_name`` to each of ``names``."""
    names = list(names)

    def dimension(path: list[str], context: Context, payload: TestPayload) -> dict[str, Any]:
        return {name: Context.new_env_var(var_name, name) for name in names}

    dimension.__qualname__ = f"env_dimension[{var_name}]"
    return dimension


@pytest.fixture(autouse=True)
def clean_state():
    """Reset the provider registry and the variantforge logger around each test."""
    reset_registry()
    _reset_logger()
    yield
    reset_registry()
    _reset_logger()


@pytest.fixture
def writer() -> VariantWriter:
    return VariantWriter()


@pytest.fixture
def sample_tests() -> TestPayload:
    """Two input tests with different entry kinds."""
    return {
        "basic": TestEntry(module="sample_cases.basic", method="run_tests"),
        "smoke": TestEntry(code="assert True"),
    }


@pytest.fixture
def two_by_two() -> list[Callable[..., dict[str, Any]]]:
    """Two dimensions with two variants each: a/b then x/y."""
    return [make_env_dimension("FIRST", ["b", "a"]), make_env_dimension("SECOND", ["y", "x"])]


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """A not-yet-existing output directory."""
    return tmp_path / "generated"


@pytest.fixture
def env_dimension() -> Callable[..., Callable[..., dict[str, Any]]]:
    """Factory for dimensions that set one environment variable."""
    return make_env_dimension
