"""Test entries: the units of the payload threaded through the tumbler."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any

from variantforge.combinatorial.tumbler import escapes_directory
from variantforge.errors import ConfigurationError, DuplicateTestNameError


@dataclass
class TestEntry:
    """One test to be wrapped in a generated script.

    Attributes:
        module: Dotted import path of the test target.
        method: Attribute path called on the module after import, e.g. "run_tests".
        lib: Directory prepended to sys.path before the target is imported.
        require: Script executed (runpy.run_path) before the target.
        code: Inline code appended at the end of the script.
        prologue: Replaces the default "#!/usr/bin/env python" header.
    """

    __test__ = False  # not a pytest test class

    module: str | None = None
    method: str | None = None
    lib: str | None = None
    require: str | None = None
    code: str | None = None
    prologue: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], name: str = "") -> TestEntry:
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown keys for test {name or '<unnamed>'}: {', '.join(unknown)}",
                field="input_tests",
            )
        return cls(**dict(data))

    def to_dict(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


TestPayload = dict[str, TestEntry]


def add_test(input_tests: TestPayload, test_name: str, entry: TestEntry | Mapping[str, Any]) -> None:
    """Register ``entry`` under ``test_name``.

    Raises:
        ConfigurationError: If the name is empty, absolute or contains "..".
        DuplicateTestNameError: If the name is already taken.
    """
    if not test_name or escapes_directory(test_name):
        raise ConfigurationError(
            f"Test name {test_name!r} must be a relative path without '..'",
            field="input_tests",
        )
    if test_name in input_tests:
        raise DuplicateTestNameError(test_name)
    if not isinstance(entry, TestEntry):
        entry = TestEntry.from_dict(entry, name=test_name)
    input_tests[test_name] = entry


def build_payload(tests: Mapping[str, TestEntry | Mapping[str, Any]]) -> TestPayload:
    """Normalise a mapping of test definitions into a payload."""
    payload: TestPayload = {}
    for name, entry in tests.items():
        add_test(payload, name, entry)
    return payload
