"""Tests for the `stubkit inspect` command."""

from click.testing import CliRunner

from stubkit.cli import cli

USER = "tests.test_utils.sample_types:User"


def _intercepted_names(output: str) -> list[str]:
    line = next(line for line in output.splitlines() if line.startswith("Intercepted"))
    return line.split(": ", 1)[1].split(", ")


def test_inspect_shows_type_summary() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", USER])

    assert result.exit_code == 0, result.output
    assert "tests.test_utils.sample_types.User" in result.output
    assert "Abstract:    no" in result.output
    assert "get_name" in result.output
    assert "display_name" in result.output


def test_inspect_default_policy_only_intercepts_overridden_operations() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", USER, "--override", "save", "--override", "name"])

    assert result.exit_code == 0, result.output
    assert "Intercepted (only-overridden): save" in result.output
    assert _intercepted_names(result.output) == ["save"]


def test_inspect_all_except() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", USER, "--policy", "all-except", "--except", "save"])

    assert result.exit_code == 0, result.output
    names = _intercepted_names(result.output)
    assert "save" not in names
    assert "get_name" in names
    assert "rename_and_save" in names


def test_inspect_reports_new_attributes() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", USER, "--override", "nickname"])

    assert result.exit_code == 0
    assert "Would attach as new attributes: nickname" in result.output


def test_inspect_abstract_type() -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli, ["inspect", "tests.test_utils.sample_types:Repository", "--policy", "none"]
    )

    assert result.exit_code == 0, result.output
    assert "Abstract:    yes" in result.output
    assert _intercepted_names(result.output) == ["backend", "find", "store"]


def test_inspect_all_except_requires_except() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", USER, "--policy", "all-except"])

    assert result.exit_code == 2
    assert "requires --except" in result.output


def test_inspect_except_requires_all_except_policy() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", USER, "--except", "save"])

    assert result.exit_code == 2
    assert "only valid with --policy all-except" in result.output


def test_inspect_unknown_type() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["inspect", "tests.test_utils.sample_types:Ghost"])

    assert result.exit_code == 1
    assert "doesn't exist" in result.output


def test_debug_flag_is_accepted() -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["--debug", "inspect", USER])

    assert result.exit_code == 0, result.output
