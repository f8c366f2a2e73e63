"""Body of a generated test script."""

from __future__ import annotations

from variantforge.context import Context, quote_value
from variantforge.writer.entries import TestEntry

DEFAULT_PROLOGUE = "#!/usr/bin/env python\n\n"
SCRIPT_SUFFIX = ".py"


def render_test_script(context: Context, entry: TestEntry) -> str:
    """Build the script for one test entry at one leaf.

    Order: prologue, the context's settings (most specific first), lib
    path, required script, target import and call, trailing inline code.
    """
    body = [entry.prologue or DEFAULT_PROLOGUE]

    body.append(context.get_code())
    body.append("\n")

    if entry.lib:
        body.append(f"import sys\nsys.path.insert(0, {quote_value(entry.lib)})\n\n")

    if entry.require:
        body.append(f"import runpy\nrunpy.run_path({quote_value(entry.require)})\n\n")

    if entry.module:
        body.append(f"import {entry.module}\n\n")
        if entry.method:
            body.append(f"{entry.module}.{entry.method}()\n\n")

    if entry.code:
        body.append(f"{entry.code}\n\n")

    return "".join(body)
