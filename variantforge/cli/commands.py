"""CLI commands for variantforge."""

from __future__ import annotations

import sys
from collections.abc import Callable
from functools import wraps
from typing import Any

import click

from variantforge import __version__
from variantforge.cli.output import CLIOutput, PlannedLeaf
from variantforge.combinatorial import Tumbler, implemented_phases, normalize_providers, provider_name
from variantforge.config import GeneratorConfig, collect_input_tests, find_config_file, load_config
from variantforge.context import Context
from variantforge.errors import VariantForgeError
from variantforge.observability import setup_logging
from variantforge.plugins import ProviderLoader, get_registry
from variantforge.writer import TestPayload, VariantWriter

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def _handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Report VariantForgeError on stderr and exit with EXIT_FAILURE."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except VariantForgeError as e:
            output = click.get_current_context().obj.get("output") or CLIOutput()
            output.error(e)
            sys.exit(EXIT_FAILURE)

    return wrapper


def _load(ctx: click.Context, **overrides: Any) -> GeneratorConfig:
    return load_config(ctx.obj["config_path"], **ctx.obj["overrides"], **overrides)


def variant_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by generate and plan."""
    options = [
        click.argument("output_dir", required=False),
        click.option(
            "--provider", "-p", "providers", multiple=True,
            help="Variant provider (namespace, module:attr or registered name); repeat per dimension",
        ),
        click.option(
            "--search-path", "-s", multiple=True,
            help="Package whose modules become input tests",
        ),
        click.option("--test-prefix", default=None, help="Replace the search package in test names"),
        click.option(
            "--test-files", "test_files_dir", type=click.Path(file_okay=False), default=None,
            help="Directory of test scripts to run in every variant",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _variant_overrides(
    output_dir: str | None,
    providers: tuple[str, ...],
    search_path: tuple[str, ...],
    test_prefix: str | None,
    test_files_dir: str | None,
) -> dict[str, Any]:
    return {
        "output_dir": output_dir,
        "variant_providers": list(providers) or None,
        "test_search_path": list(search_path) or None,
        "test_prefix": test_prefix,
        "test_files_dir": test_files_dir,
    }


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Path to config file")
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default=None,
    help="Log output format",
)
@click.version_option(__version__, prog_name="variantforge")
@click.pass_context
@_handle_errors
def cli(ctx: click.Context, verbose: bool, config: str | None, log_format: str | None) -> None:
    """variantforge - generate test scripts for every combination of variants."""
    ctx.ensure_object(dict)

    ctx.obj["config_path"] = config or find_config_file()
    ctx.obj["overrides"] = {"verbose": True if verbose else None, "log_format": log_format}
    ctx.obj["output"] = CLIOutput(verbose=verbose)

    config_obj = _load(ctx)
    ctx.obj["config"] = config_obj
    ctx.obj["output"].verbose = config_obj.verbose

    setup_logging(config_obj.verbose, config_obj.log_format)


@cli.command()
@variant_options
@click.option("--allow-dir-overwrite", is_flag=True, help="Write into an existing output directory")
@click.option("--allow-file-overwrite", is_flag=True, help="Replace existing test scripts")
@click.pass_context
@_handle_errors
def generate(
    ctx: click.Context,
    output_dir: str | None,
    providers: tuple[str, ...],
    search_path: tuple[str, ...],
    test_prefix: str | None,
    test_files_dir: str | None,
    allow_dir_overwrite: bool,
    allow_file_overwrite: bool,
) -> None:
    """Write one test script per input test for every variant combination."""
    config = _load(
        ctx,
        **_variant_overrides(output_dir, providers, search_path, test_prefix, test_files_dir),
        allow_dir_overwrite=True if allow_dir_overwrite else None,
        allow_file_overwrite=True if allow_file_overwrite else None,
    )

    writer = VariantWriter(
        allow_dir_overwrite=config.allow_dir_overwrite,
        allow_file_overwrite=config.allow_file_overwrite,
    )
    input_tests = collect_input_tests(config, writer)
    result = writer.write_test_variants(
        input_tests=input_tests,
        variant_providers=config.variant_providers,
        output_dir=config.output_dir,
    )

    ctx.obj["output"].generation_summary(result)


@cli.command()
@variant_options
@click.pass_context
@_handle_errors
def plan(
    ctx: click.Context,
    output_dir: str | None,
    providers: tuple[str, ...],
    search_path: tuple[str, ...],
    test_prefix: str | None,
    test_files_dir: str | None,
) -> None:
    """Show the variant tree generate would write, without writing it."""
    config = _load(
        ctx, **_variant_overrides(output_dir, providers, search_path, test_prefix, test_files_dir)
    )

    loader = ProviderLoader()
    input_tests = collect_input_tests(config, VariantWriter(loader=loader))
    dimensions = normalize_providers(config.variant_providers, loader=loader)

    leaves: list[PlannedLeaf] = []

    def collect(path: list[str], context: Context, payload: TestPayload) -> None:
        leaves.append(PlannedLeaf(path=list(path), tests=sorted(payload)))

    Tumbler(consumer=collect).tumble(dimensions, [], Context(), input_tests)

    ctx.obj["output"].plan(config.output_dir or "(output_dir)", leaves)


@cli.command()
@click.argument("namespace", required=False)
@click.pass_context
@_handle_errors
def providers(ctx: click.Context, namespace: str | None) -> None:
    """List provider modules below NAMESPACE, or registered providers."""
    loader = ProviderLoader()

    if namespace:
        modules = loader.load_namespace(namespace)
        rows = [(module.__name__, implemented_phases(module)) for module in modules]
        ctx.obj["output"].providers(f"Variant providers in {namespace}", rows)
        return

    loader.discover_entry_points()
    registry = get_registry()
    rows = [
        (f"{name} ({provider_name(registry.get(name))})", implemented_phases(registry.get(name)))
        for name in registry.names()
    ]
    ctx.obj["output"].providers("Registered variant providers", rows)


@cli.command()
@click.option("--search-path", "-s", multiple=True, help="Package whose modules become input tests")
@click.option("--test-prefix", default=None, help="Replace the search package in test names")
@click.option(
    "--test-files", "test_files_dir", type=click.Path(file_okay=False), default=None,
    help="Directory of test scripts",
)
@click.pass_context
@_handle_errors
def tests(
    ctx: click.Context,
    search_path: tuple[str, ...],
    test_prefix: str | None,
    test_files_dir: str | None,
) -> None:
    """List the input tests the configuration resolves to."""
    config = _load(
        ctx,
        test_search_path=list(search_path) or None,
        test_prefix=test_prefix,
        test_files_dir=test_files_dir,
    )
    input_tests = collect_input_tests(config, VariantWriter())
    ctx.obj["output"].tests(input_tests)
