"""Writing test variants to disk.

VariantWriter glues the pieces together: it gathers input tests, turns
the configured providers into dimensions, tumbles through every
combination and, at each leaf, writes one script per test entry under a
directory path made of the leaf's variant names.

Example:
    >>> writer = VariantWriter()
    >>> tests = writer.find_input_test_modules(search_path=["myproject.testcases"])
    >>> result = writer.write_test_variants(
    ...     input_tests=tests,
    ...     variant_providers=["myproject.variants.driver", "myproject.variants.locale"],
    ...     output_dir="t/generated",
    ... )
    >>> result.leaves, len(result.files)
    (4, 8)
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from variantforge.combinatorial import Tumbler, normalize_providers
from variantforge.context import Context
from variantforge.errors import (
    ArtifactWriteError,
    ConfigurationError,
    ErrorContext,
    OutputConflictError,
)
from variantforge.observability import log_context
from variantforge.plugins import ProviderLoader
from variantforge.writer.entries import TestEntry, TestPayload, add_test
from variantforge.writer.script import SCRIPT_SUFFIX, render_test_script

logger = logging.getLogger(__name__)

_NON_NAME_CHARS = re.compile(r"[^\w.]+")

SCRIPT_MODE = 0o644


@dataclass
class GenerationResult:
    """Outcome of one write_test_variants() call."""

    output_dir: str
    leaves: int = 0
    files: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.files


class VariantWriter:
    """Generates test scripts for every combination of variants.

    Attributes:
        allow_dir_overwrite: Permit an output directory that already exists.
            Without it a leftover directory from a previous run aborts the
            run before anything is written.
        allow_file_overwrite: Permit replacing an existing script.
    """

    def __init__(
        self,
        allow_dir_overwrite: bool = False,
        allow_file_overwrite: bool = False,
        loader: ProviderLoader | None = None,
        **unknown: Any,
    ) -> None:
        if unknown:
            raise ConfigurationError(
                f"Unknown {type(self).__name__} arguments: {', '.join(sorted(unknown))}"
            )
        self.allow_dir_overwrite = allow_dir_overwrite
        self.allow_file_overwrite = allow_file_overwrite
        self.loader = loader or ProviderLoader()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def write_test_variants(
        self,
        input_tests: TestPayload | None = None,
        variant_providers: Sequence[Any] | None = None,
        output_dir: str | os.PathLike[str] | None = None,
        **unknown: Any,
    ) -> GenerationResult:
        """Write one script per test entry for every variant combination.

        Args:
            input_tests: Payload of test entries, keyed by test name.
            variant_providers: Ordered dimensions (see normalize_providers).
            output_dir: Root of the generated tree.

        Raises:
            ConfigurationError: Missing or unknown arguments.
            OutputConflictError: output_dir (or a script) already exists.
            ProviderError: A dimension failed.
        """
        if input_tests is None:
            raise ConfigurationError("input_tests not specified", field="input_tests")
        if variant_providers is None:
            raise ConfigurationError("variant_providers not specified", field="variant_providers")
        if not output_dir:
            raise ConfigurationError("output_dir not specified", field="output_dir")
        if unknown:
            raise ConfigurationError(
                f"write_test_variants: unknown arguments: {', '.join(sorted(unknown))}"
            )

        output_dir = os.fspath(output_dir)
        if os.path.isdir(output_dir) and not self.allow_dir_overwrite:
            raise OutputConflictError(output_dir, f"write_test_variants: {output_dir} already exists")

        dimensions = normalize_providers(variant_providers, loader=self.loader)
        result = GenerationResult(output_dir=output_dir)

        def consumer(path: list[str], context: Context, payload: TestPayload) -> None:
            # payload is this leaf's own copy, possibly edited by providers
            with log_context(variant="/".join(path)):
                result.files.extend(self.write_output_files(path, context, payload, output_dir))

        tumbler = Tumbler(consumer=consumer)
        result.leaves = tumbler.tumble(dimensions, [], Context(), input_tests)

        if result.empty:
            logger.warning("No tests written to %s!", output_dir)
        else:
            logger.info(
                "Wrote %d test scripts for %d variant combinations to %s",
                len(result.files), result.leaves, output_dir,
            )
        return result

    def write_output_files(
        self,
        path: Sequence[str],
        context: Context,
        input_tests: Mapping[str, TestEntry | Mapping[str, Any]],
        output_dir: str,
    ) -> list[str]:
        """Write the scripts for one leaf. Returns the paths written.

        Raises:
            OutputConflictError: A variant or test name would place a
                script outside ``output_dir``.
        """
        base_dir = os.path.join(output_dir, *path)
        root = os.path.abspath(output_dir)
        written = []

        for test_name in sorted(input_tests):
            entry = input_tests[test_name]
            if not isinstance(entry, TestEntry):
                entry = TestEntry.from_dict(entry, name=test_name)

            # test_name may include a subdirectory path
            file_name = test_name if test_name.endswith(SCRIPT_SUFFIX) else test_name + SCRIPT_SUFFIX
            full_path = os.path.join(base_dir, file_name)
            if os.path.commonpath([root, os.path.abspath(full_path)]) != root:
                raise OutputConflictError(
                    full_path, f"{full_path} is outside the output directory {output_dir}"
                )

            logger.info("Writing %s", full_path)
            self.write_file(full_path, render_test_script(context, entry))
            written.append(full_path)

        return written

    def write_file(self, file_path: str, content: str) -> None:
        """Atomically write ``content`` to ``file_path``, creating parent dirs."""
        if os.path.exists(file_path) and not self.allow_file_overwrite:
            raise OutputConflictError(file_path, f"{file_path} already exists!")

        directory = os.path.dirname(file_path) or "."
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=directory, prefix=f".{os.path.basename(file_path)}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            # mkstemp creates 0600
            os.chmod(tmp_path, SCRIPT_MODE)
            os.replace(tmp_path, file_path)
        except OSError as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise ArtifactWriteError(
                f"Failed to write {file_path}: {e}",
                context=ErrorContext(output_path=file_path),
                cause=e,
            ) from e

    # ------------------------------------------------------------------
    # Gathering input tests
    # ------------------------------------------------------------------

    def add_test(self, input_tests: TestPayload, test_name: str,
                 entry: TestEntry | Mapping[str, Any]) -> None:
        add_test(input_tests, test_name, entry)

    def add_test_module(
        self,
        input_tests: TestPayload,
        module_name: str,
        edit_test_name: Callable[[str], str] | None = None,
    ) -> None:
        """Add a test that imports ``module_name`` and calls its run_tests()."""
        name = edit_test_name(module_name) if edit_test_name else module_name
        name = _NON_NAME_CHARS.sub("_", name).replace(".", "/")

        self.add_test(input_tests, name, TestEntry(module=module_name, method="run_tests"))

    def find_input_test_modules(
        self,
        search_path: Sequence[str] | None = None,
        test_prefix: str | None = None,
        input_tests: TestPayload | None = None,
        **unknown: Any,
    ) -> TestPayload:
        """Add a test for every module below the packages in ``search_path``.

        Test names are the dotted module names turned into paths
        (``pkg.cases.basic`` -> ``pkg/cases/basic``). With ``test_prefix``
        the leading search package and its dot are replaced by the prefix.
        Modules are found without being imported.
        """
        if not search_path:
            raise ConfigurationError("search_path not specified", field="search_path")
        if unknown:
            raise ConfigurationError(
                f"find_input_test_modules: unknown arguments: {', '.join(sorted(unknown))}"
            )
        if input_tests is None:
            input_tests = {}

        edit_test_name = None
        if test_prefix is not None:
            namespaces_re = re.compile(
                r"^(" + "|".join(re.escape(ns) for ns in search_path) + r")\."
            )

            def edit_test_name(name: str) -> str:
                return namespaces_re.sub(lambda m: test_prefix, name, count=1)

        module_names = sorted(
            name for namespace in search_path for name in self.loader.iter_module_names(namespace)
        )
        logger.debug("find_input_test_modules %s: %s", ", ".join(search_path), module_names)

        for module_name in module_names:
            self.add_test_module(input_tests, module_name, edit_test_name)

        return input_tests

    def find_input_test_files(
        self,
        search_dir: str | os.PathLike[str],
        pattern: str = "*.py",
        input_tests: TestPayload | None = None,
    ) -> TestPayload:
        """Add a test that runs each script matching ``pattern`` under ``search_dir``."""
        root = Path(search_dir)
        if not root.is_dir():
            raise ConfigurationError(f"Test directory not found: {root}", field="test_files_dir")
        if input_tests is None:
            input_tests = {}

        for script in sorted(root.rglob(pattern)):
            if not script.is_file() or script.name.startswith("_"):
                continue
            name = script.relative_to(root).with_suffix("").as_posix()
            self.add_test(input_tests, name, TestEntry(require=str(script)))

        return input_tests
