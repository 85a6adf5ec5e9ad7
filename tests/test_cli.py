"""Tests for the pssh command line."""

from pathlib import Path
from unittest import mock

import pytest
from typer.testing import CliRunner

from pssh import __version__
from pssh import cli
from pssh.cli import app, config_paths

runner = CliRunner()


@pytest.fixture
def env(home, tmp_path, monkeypatch, write_config):
    """Isolated HOME and a settings file that reads only ~/.ssh/config."""
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    # Keep long temp paths on one line
    monkeypatch.setattr(cli.console, "width", 400)

    settings = write_config(
        tmp_path / "pssh.yaml",
        """
        ssh:
          configs: []
        """,
    )
    monkeypatch.setenv("PSSH_SETTINGS", str(settings))

    write_config(
        home / ".ssh" / "config",
        """
        Host web1
            HostName 10.0.0.5
            User alice
            IdentityFile ~/.ssh/web_key
        Host web2
            HostName 10.0.0.5
        Host db1
            HostName 10.0.0.9
            Port 5432
        """,
    )
    return home


class TestConfigPaths:
    def test_extra_path_appended(self):
        paths = config_paths(["/etc/ssh/ssh_config"], "~/.ssh/config", Path("/home/a"))
        assert paths == ["/etc/ssh/ssh_config", "~/.ssh/config"]

    def test_same_file_read_once(self):
        paths = config_paths(
            ["/etc/ssh/ssh_config", "~/.ssh/config"], "/home/a/.ssh/config", Path("/home/a")
        )
        assert paths == ["/etc/ssh/ssh_config", "~/.ssh/config"]


class TestVersion:
    def test_version(self, env):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert f"pssh version {__version__}" in result.output

    def test_version_ignores_broken_settings(self, env, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("connect: [unclosed\n")

        result = runner.invoke(app, ["--settings", str(bad), "version"])

        assert result.exit_code == 0
        assert f"pssh version {__version__}" in result.output


class TestList:
    def test_lists_canonical_hosts(self, env):
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0
        assert "web1" in result.output
        assert "(web2)" in result.output
        assert "db1" in result.output
        assert "5432" in result.output

    def test_extra_ssh_config(self, env, tmp_path, write_config):
        extra = write_config(tmp_path / "extra.conf", "Host cache1\n  HostName 10.0.1.1\n")

        result = runner.invoke(app, ["--ssh-config", str(extra), "list"])

        assert result.exit_code == 0
        assert "cache1" in result.output
        assert "web1" not in result.output

    def test_load_error_is_fatal(self, env):
        result = runner.invoke(app, ["--ssh-config", "~/.ssh/missing", "list"])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "missing" in result.output

    def test_bad_settings_is_fatal(self, env, tmp_path):
        bad = tmp_path / "bad.yaml"
        bad.write_text("ui:\n  table_height: 0\n")

        result = runner.invoke(app, ["--settings", str(bad), "list"])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestShow:
    def test_shows_block_directives(self, env):
        result = runner.invoke(app, ["show", "web2"])

        assert result.exit_code == 0
        assert "web1" in result.output
        assert "identityfile ~/.ssh/web_key" in result.output

    def test_unknown_host(self, env):
        result = runner.invoke(app, ["show", "nope"])

        assert result.exit_code == 1
        assert "not found" in result.output


class TestSelectAndConnect:
    def test_connects_to_selected_host(self, env):
        with mock.patch("pssh.cli.select_host", side_effect=lambda hosts, **kw: hosts[0]) as select, mock.patch(
            "pssh.cli.connect", return_value=0
        ) as connect:
            result = runner.invoke(app, [])

        assert result.exit_code == 0
        hosts = select.call_args.args[0]
        assert [h.name for h in hosts] == ["web1", "db1"]

        host = connect.call_args.args[0]
        assert host.name == "web1"
        assert connect.call_args.kwargs == {"template": "ssh {name}", "loop": False, "retry_delay": 2.0}

    def test_command_and_loop_options(self, env):
        with mock.patch("pssh.cli.select_host", side_effect=lambda hosts, **kw: hosts[1]), mock.patch(
            "pssh.cli.connect", return_value=0
        ) as connect:
            result = runner.invoke(app, ["--loop", "--command", "mosh {name}"])

        assert result.exit_code == 0
        assert connect.call_args.kwargs["template"] == "mosh {name}"
        assert connect.call_args.kwargs["loop"] is True

    def test_exit_code_passed_through(self, env):
        with mock.patch("pssh.cli.select_host", side_effect=lambda hosts, **kw: hosts[0]), mock.patch(
            "pssh.cli.connect", return_value=255
        ):
            result = runner.invoke(app, [])

        assert result.exit_code == 255

    def test_cancelled_selection_exits_quietly(self, env):
        with mock.patch("pssh.cli.select_host", return_value=None), mock.patch("pssh.cli.connect") as connect:
            result = runner.invoke(app, [])

        assert result.exit_code == 0
        connect.assert_not_called()

    def test_load_error_before_ui(self, env):
        with mock.patch("pssh.cli.select_host") as select:
            result = runner.invoke(app, ["--ssh-config", "~/.ssh/missing"])

        assert result.exit_code == 1
        select.assert_not_called()

    def test_interrupted_loop(self, env):
        with mock.patch("pssh.cli.select_host", side_effect=lambda hosts, **kw: hosts[0]), mock.patch(
            "pssh.cli.connect", side_effect=KeyboardInterrupt
        ):
            result = runner.invoke(app, ["--loop"])

        assert result.exit_code == 130
        assert "Interrupted" in result.output
