"""variantforge CLI - Command line interface for variantforge."""

from variantforge.cli.commands import cli
from variantforge.cli.output import CLIOutput, PlannedLeaf


def main() -> None:
    """Main entry point for the variantforge CLI."""
    cli()


__all__ = ["main", "cli", "CLIOutput", "PlannedLeaf"]
