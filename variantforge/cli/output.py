"""Rich console output for the variantforge CLI."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from variantforge.errors import VariantForgeError
from variantforge.writer import GenerationResult, TestEntry


@dataclass
class PlannedLeaf:
    """One combination the tumbler would write."""

    path: list[str]
    tests: list[str] = field(default_factory=list)


def describe_entry(entry: TestEntry) -> str:
    if entry.module:
        return f"{entry.module}.{entry.method}()" if entry.method else f"import {entry.module}"
    if entry.require:
        return f"run {entry.require}"
    if entry.code:
        return "inline code"
    return "(empty)"


class CLIOutput:
    """Formats CLI results for the terminal.

    Example:
        >>> output = CLIOutput()
        >>> output.generation_summary(result)
    """

    def __init__(self, console: Console | None = None, err_console: Console | None = None,
                 verbose: bool = False) -> None:
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)
        self.verbose = verbose

    def error(self, error: Exception) -> None:
        if isinstance(error, VariantForgeError) and self.verbose:
            text = error.format_verbose()
        else:
            text = str(error)
        self.err_console.print(f"[bold red]Error:[/bold red] {escape(text)}", soft_wrap=True)

    def generation_summary(self, result: GenerationResult) -> None:
        if result.empty:
            self.console.print(
                f"[yellow]No tests written to {escape(result.output_dir)}![/yellow] "
                f"({result.leaves} variant combinations)",
                soft_wrap=True,
            )
            return
        self.console.print(
            f"[green]✓[/green] Wrote [bold]{len(result.files)}[/bold] test scripts "
            f"for [bold]{result.leaves}[/bold] variant combinations to {escape(result.output_dir)}",
            soft_wrap=True,
        )

    def plan(self, root_label: str, leaves: Sequence[PlannedLeaf]) -> None:
        tree = Tree(escape(root_label))
        nodes: dict[tuple[str, ...], Tree] = {(): tree}

        for leaf in leaves:
            for depth in range(1, len(leaf.path) + 1):
                key = tuple(leaf.path[:depth])
                if key not in nodes:
                    nodes[key] = nodes[key[:-1]].add(f"[cyan]{escape(key[-1])}[/cyan]")
            node = nodes[tuple(leaf.path)]
            for test_name in leaf.tests:
                node.add(escape(test_name))

        self.console.print(tree)
        scripts = sum(len(leaf.tests) for leaf in leaves)
        self.console.print(f"{len(leaves)} variant combinations, {scripts} test scripts")

    def providers(self, title: str, rows: Iterable[tuple[str, Sequence[str]]]) -> None:
        table = Table(title=title)
        table.add_column("Provider", overflow="fold")
        table.add_column("Phases", overflow="fold")
        for name, phases in rows:
            table.add_row(escape(name), ", ".join(phases) or "-")
        self.console.print(table)

    def tests(self, input_tests: Mapping[str, Any]) -> None:
        if not input_tests:
            self.console.print("[yellow]No input tests configured.[/yellow]")
            return
        table = Table(title=f"{len(input_tests)} input test(s)")
        table.add_column("Test", overflow="fold")
        table.add_column("Runs", overflow="fold")
        for name in sorted(input_tests):
            entry = input_tests[name]
            if not isinstance(entry, TestEntry):
                entry = TestEntry.from_dict(entry, name=name)
            table.add_row(escape(name), escape(describe_entry(entry)))
        self.console.print(table)
