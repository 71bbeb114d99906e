"""
Tests for the command-line interface.
"""

import json
from unittest.mock import patch

import pytest
import responses

from conftest import LINUX_X64, build_corrupt_archive, make_installed, tarball_url
from zvpms import __version__
from zvpms.cli.parser import CLI, MANAGEMENT_COMMANDS


@pytest.fixture
def cli(zvpms_paths, static_index):
    """CLI bound to a temporary root and a static index."""
    return CLI(paths=zvpms_paths, platform=LINUX_X64, fetcher=static_index)


def write_registry(paths, current, installed):
    paths.registry_file.write_text(
        json.dumps({"current_version": current, "installed_versions": installed})
    )
    for version in installed:
        make_installed(paths, version)


def read_registry(paths):
    return json.loads(paths.registry_file.read_text())


class TestParsing:
    """Test argument parsing."""

    def test_parse_install(self, cli):
        args = cli.parse_args(["install", "0.11.0"])
        assert args.command == "install"
        assert args.version == "0.11.0"
        assert args.verbose is False

    def test_parse_rename(self, cli):
        args = cli.parse_args(["rename", "0.11.0", "0.11.1", "--verbose"])
        assert (args.old, args.new) == ("0.11.0", "0.11.1")
        assert args.verbose is True

    def test_missing_argument(self, cli):
        """Test a missing positional is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.parse_args(["install"])
        assert exc_info.value.code == 2

    def test_management_commands(self):
        assert MANAGEMENT_COMMANDS == {
            "install",
            "use",
            "list",
            "remove",
            "rename",
            "update",
            "version",
            "help",
        }


class TestRun:
    """Test CLI.run() for management commands."""

    def test_no_arguments_prints_help(self, cli, capsys):
        assert cli.run([]) == 0
        assert "usage: zvpms" in capsys.readouterr().out

    def test_help_command(self, cli, capsys):
        assert cli.run(["help"]) == 0
        assert "Zig compiler proxy" in capsys.readouterr().out

    def test_list(self, cli, zvpms_paths, capsys):
        """Test list marks the current version."""
        write_registry(zvpms_paths, "0.12.0", ["0.11.0", "0.12.0"])

        assert cli.run(["list"]) == 0

        assert capsys.readouterr().out == (
            "Installed versions:\n  0.11.0\n  0.12.0 (current)\n"
        )

    def test_list_empty(self, cli, capsys):
        assert cli.run(["list"]) == 0
        assert capsys.readouterr().out == "Installed versions:\n"

    def test_list_with_corrupt_registry(self, cli, zvpms_paths, capsys):
        """Test a corrupt registry is reported and treated as empty."""
        zvpms_paths.registry_file.write_text("{oops")

        assert cli.run(["list"]) == 0

        captured = capsys.readouterr()
        assert captured.out == "Installed versions:\n"
        assert "Warning:" in captured.err

    def test_use(self, cli, zvpms_paths):
        write_registry(zvpms_paths, None, ["0.11.0"])
        assert cli.run(["use", "0.11.0"]) == 0
        assert read_registry(zvpms_paths)["current_version"] == "0.11.0"

    def test_use_takes_lock(self, cli, zvpms_paths):
        """Test mutating commands create the lock file, read-only ones do not."""
        write_registry(zvpms_paths, None, ["0.11.0"])

        cli.run(["list"])
        assert not zvpms_paths.lock_file.parent.exists()

        cli.run(["use", "0.11.0"])
        assert zvpms_paths.lock_file.parent.is_dir()

    def test_use_not_installed(self, cli, zvpms_paths, capsys):
        """Test errors are reported on stderr with exit code 1."""
        assert cli.run(["use", "0.11.0"]) == 1
        assert "Error: Version 0.11.0 is not installed" in capsys.readouterr().err
        assert not zvpms_paths.registry_file.exists()

    def test_invalid_version(self, cli, capsys):
        assert cli.run(["use", "latest"]) == 1
        assert "Invalid version 'latest'" in capsys.readouterr().err

    def test_remove(self, cli, zvpms_paths):
        write_registry(zvpms_paths, "0.11.0", ["0.11.0"])
        assert cli.run(["remove", "0.11.0"]) == 0
        assert read_registry(zvpms_paths) == {
            "current_version": None,
            "installed_versions": [],
        }
        assert not zvpms_paths.version_dir("0.11.0").exists()

    def test_rename(self, cli, zvpms_paths):
        write_registry(zvpms_paths, "0.11.0", ["0.11.0"])
        assert cli.run(["rename", "0.11.0", "0.11.5"]) == 0
        assert read_registry(zvpms_paths)["installed_versions"] == ["0.11.5"]
        assert zvpms_paths.version_dir("0.11.5").is_dir()

    def test_rename_invalid_new_name(self, cli, zvpms_paths):
        """Test both rename arguments must be versions."""
        write_registry(zvpms_paths, "0.11.0", ["0.11.0"])
        assert cli.run(["rename", "0.11.0", "mine"]) == 1
        assert zvpms_paths.version_dir("0.11.0").is_dir()

    def test_install_corrupt_archive(self, cli, zvpms_paths, http, capsys):
        """Test a corrupt download is reported as an extraction error, exit 1."""
        http.add(
            responses.GET,
            tarball_url("0.11.0"),
            body=build_corrupt_archive("0.11.0"),
            status=200,
        )

        assert cli.run(["install", "0.11.0"]) == 1

        assert "Error: Failed to extract" in capsys.readouterr().err
        assert not zvpms_paths.registry_file.exists()

    def test_update_already_latest(self, cli, capsys):
        assert cli.run(["update", "0.12.0"]) == 0
        assert "already the latest" in capsys.readouterr().err

    def test_update_series_missing(self, cli, capsys):
        assert cli.run(["update", "0.13.0"]) == 1
        assert "No versions found for 0.13.x" in capsys.readouterr().err

    def test_version_without_selection(self, cli, capsys):
        assert cli.run(["version"]) == 0
        out = capsys.readouterr().out
        assert f"zvpms {__version__}" in out
        assert "No Zig version currently set" in out

    def test_version_with_selection(self, cli, zvpms_paths, capsys):
        write_registry(zvpms_paths, "0.11.0", ["0.11.0"])
        assert cli.run(["version"]) == 0
        assert "Current Zig version: 0.11.0" in capsys.readouterr().out

    def test_keyboard_interrupt(self, cli):
        """Test Ctrl+C during a command exits with 130."""
        with patch(
            "zvpms.cli.commands.list_versions.run", side_effect=KeyboardInterrupt
        ):
            assert cli.run(["list"]) == 130


class TestProxyMode:
    """Test that unknown first arguments are forwarded to the compiler."""

    def test_forwards_everything(self, cli):
        with patch("zvpms.cli.parser.run_proxy", return_value=5) as mock_proxy:
            assert cli.run(["build", "--release=fast", "-v"]) == 5

        context, argv = mock_proxy.call_args[0]
        assert argv == ["build", "--release=fast", "-v"]
        assert context.platform == LINUX_X64

    def test_flags_not_parsed(self, cli):
        """Test a leading flag is forwarded rather than parsed."""
        with patch("zvpms.cli.parser.run_proxy", return_value=0) as mock_proxy:
            assert cli.run(["--help"]) == 0
        assert mock_proxy.call_args[0][1] == ["--help"]

    def test_no_version_selected(self, cli, capsys):
        assert cli.run(["build"]) == 2
        assert "No Zig version is currently set" in capsys.readouterr().err
