"""Tests for the variantforge CLI."""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from variantforge import __version__
from variantforge.cli import cli
from variantforge.combinatorial import VariantProvider
from variantforge.plugins import get_registry

DRIVER_AND_LOCALE = ["-p", "sample_variants.driver", "-p", "sample_variants.locale"]


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_cwd(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Run every command away from any real variantforge.yaml or .env."""
    for name in ("OUTPUT_DIR", "VERBOSE", "LOG_FORMAT"):
        monkeypatch.delenv(f"VARIANTFORGE_{name}", raising=False)
    monkeypatch.chdir(tmp_path)


class TestCLIBasics:
    """Tests for the command group."""

    def test_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("generate", "plan", "providers", "tests"):
            assert command in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_bad_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "custom.yaml"
        config.write_text("providers: [pkg.driver]\n")

        result = runner.invoke(cli, ["-c", str(config), "tests"])

        assert result.exit_code == 1
        assert "Unknown configuration keys: providers" in result.output


# =============================================================================
# generate
# =============================================================================


class TestGenerateCommand:
    """Tests for 'variantforge generate'."""

    def test_generate(self, runner: CliRunner, tmp_path: Path) -> None:
        output_dir = tmp_path / "generated"

        result = runner.invoke(
            cli,
            ["generate", str(output_dir), *DRIVER_AND_LOCALE, "-s", "sample_cases", "--test-prefix", ""],
        )

        assert result.exit_code == 0, result.output
        assert "Wrote 8 test scripts for 4 variant combinations" in result.output
        assert (output_dir / "sqlite" / "fr" / "more" / "extra.py").is_file()

    def test_generate_from_config_file(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "variantforge.yaml").write_text(
            "output_dir: out\n"
            "variant_providers:\n"
            "  - sample_variants.driver\n"
            "input_tests:\n"
            "  smoke:\n"
            "    code: assert True\n"
        )

        result = runner.invoke(cli, ["generate"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "out" / "pg" / "smoke.py").is_file()
        assert (tmp_path / "out" / "sqlite" / "smoke.py").is_file()

    def test_existing_output_dir(self, runner: CliRunner, tmp_path: Path) -> None:
        output_dir = tmp_path / "generated"
        output_dir.mkdir()

        result = runner.invoke(cli, ["generate", str(output_dir), "-s", "sample_cases"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_allow_dir_overwrite(self, runner: CliRunner, tmp_path: Path) -> None:
        output_dir = tmp_path / "generated"
        output_dir.mkdir()

        result = runner.invoke(
            cli, ["generate", str(output_dir), "-s", "sample_cases", "--allow-dir-overwrite"]
        )

        assert result.exit_code == 0, result.output
        assert (output_dir / "sample_cases" / "basic.py").is_file()

    def test_verbose_error_has_suggestions(self, runner: CliRunner, tmp_path: Path) -> None:
        output_dir = tmp_path / "generated"
        output_dir.mkdir()

        result = runner.invoke(cli, ["-v", "generate", str(output_dir), "-s", "sample_cases"])

        assert result.exit_code == 1
        assert "Suggestions:" in result.output

    def test_empty_dimension_warns(self, runner: CliRunner, tmp_path: Path) -> None:
        output_dir = tmp_path / "generated"

        result = runner.invoke(
            cli, ["generate", str(output_dir), "-p", "sample_variants.empty", "-s", "sample_cases"]
        )

        assert result.exit_code == 0, result.output
        assert f"No tests written to {output_dir}!" in result.output
        assert not output_dir.exists()

    def test_missing_output_dir(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["generate", "-s", "sample_cases"])

        assert result.exit_code == 1
        assert "output_dir not specified" in result.output

    def test_unknown_provider(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["generate", str(tmp_path / "out"), "-p", "no_such_provider_pkg", "-s", "sample_cases"]
        )

        assert result.exit_code == 1
        assert "Failed to load provider 'no_such_provider_pkg'" in result.output

    def test_provider_failure(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(
            cli, ["generate", str(tmp_path / "out"), "-p", "sample_variants.broken", "-s", "sample_cases"]
        )

        assert result.exit_code == 1
        assert "boom" in result.output


# =============================================================================
# plan / providers / tests
# =============================================================================


class TestPlanCommand:
    """Tests for 'variantforge plan'."""

    def test_plan_lists_tree_without_writing(self, runner: CliRunner, tmp_path: Path) -> None:
        output_dir = tmp_path / "generated"

        result = runner.invoke(
            cli, ["plan", str(output_dir), *DRIVER_AND_LOCALE, "-s", "sample_cases", "--test-prefix", ""]
        )

        assert result.exit_code == 0, result.output
        for name in ("pg", "sqlite", "en", "fr", "basic", "more/extra"):
            assert name in result.output
        assert "4 variant combinations, 8 test scripts" in result.output
        assert not output_dir.exists()

    def test_plan_with_pruning(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["plan", "-p", "sample_variants.empty", "-s", "sample_cases"])

        assert result.exit_code == 0, result.output
        assert "0 variant combinations, 0 test scripts" in result.output


class TestProvidersCommand:
    """Tests for 'variantforge providers'."""

    def test_namespace(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["providers", "sample_variants.phased"])

        assert result.exit_code == 0, result.output
        assert "sample_variants.phased.seed" in result.output
        assert "provider_initial" in result.output
        assert "provider_final" in result.output

    def test_registered(self, runner: CliRunner) -> None:
        class Drivers(VariantProvider):
            name = "drivers"

            def provider(self, path, context, payload, variants):
                return {}

        get_registry().register("db", Drivers())

        result = runner.invoke(cli, ["providers"])

        assert result.exit_code == 0, result.output
        assert "db (drivers)" in result.output

    def test_unknown_namespace(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["providers", "no_such_provider_pkg"])

        assert result.exit_code == 1
        assert "Module not found" in result.output


class TestTestsCommand:
    """Tests for 'variantforge tests'."""

    def test_lists_modules(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["tests", "-s", "sample_cases"])

        assert result.exit_code == 0, result.output
        assert "sample_cases/basic" in result.output
        assert "sample_cases.basic.run_tests()" in result.output

    def test_no_tests(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["tests"])

        assert result.exit_code == 0
        assert "No input tests configured." in result.output
