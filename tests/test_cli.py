"""Smoke tests for the CLI entrypoint."""

from click.testing import CliRunner

from trashbin.cli import cli


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Trashbin moves files into a trash can" in result.output
    for command in ("put", "list", "restore", "remove", "empty", "config"):
        assert command in result.output
