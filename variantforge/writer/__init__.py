"""Test entries, script rendering and the variant writer."""

from variantforge.writer.entries import TestEntry, TestPayload, add_test, build_payload
from variantforge.writer.script import DEFAULT_PROLOGUE, SCRIPT_SUFFIX, render_test_script
from variantforge.writer.writer import GenerationResult, VariantWriter

__all__ = [
    "TestEntry",
    "TestPayload",
    "add_test",
    "build_payload",
    "DEFAULT_PROLOGUE",
    "SCRIPT_SUFFIX",
    "render_test_script",
    "GenerationResult",
    "VariantWriter",
]
