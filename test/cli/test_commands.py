import sys
import pytest
from click.testing import CliRunner
from unittest.mock import patch, MagicMock

from mc_server_runner.__main__ import cli, main
from mc_server_runner.core.lifecycle import LaunchRequest
from mc_server_runner.error import ServerAlreadyRunningError


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def env(server_dir):
    return {"SERVER_DIR": str(server_dir)}


@pytest.fixture
def mock_controller():
    with patch("mc_server_runner.cli.commands.LifecycleController") as mock_cls:
        yield mock_cls.return_value


def test_no_command_toggles(runner, env, mock_controller):
    result = runner.invoke(cli, [], env=env)

    assert result.exit_code == 0, result.output
    mock_controller.toggle.assert_called_once_with(LaunchRequest())


def test_start_parses_all_options(runner, env, mock_controller):
    result = runner.invoke(
        cli,
        [
            "start",
            "1.20.2",
            "300",
            "--no-update",
            "--xms=1G",
            "--xmx=3G",
            "--java-cmd=/opt/java/bin/java",
            "--no-tmux",
        ],
        env=env,
    )

    assert result.exit_code == 0, result.output
    mock_controller.start.assert_called_once_with(
        LaunchRequest(
            mc_version="1.20.2",
            build="300",
            auto_update=False,
            xms="1G",
            xmx="3G",
            java_cmd="/opt/java/bin/java",
            use_tmux=False,
        )
    )


def test_stop(runner, env, mock_controller):
    result = runner.invoke(cli, ["stop"], env=env)

    assert result.exit_code == 0, result.output
    mock_controller.stop.assert_called_once_with()


def test_restart_passes_request(runner, env, mock_controller):
    result = runner.invoke(cli, ["restart", "1.20.4"], env=env)

    assert result.exit_code == 0, result.output
    mock_controller.restart.assert_called_once_with(LaunchRequest(mc_version="1.20.4"))


def test_toggle_with_version(runner, env, mock_controller):
    result = runner.invoke(cli, ["toggle", "1.21"], env=env)

    assert result.exit_code == 0, result.output
    mock_controller.toggle.assert_called_once_with(LaunchRequest(mc_version="1.21"))


def test_runner_error_exits_1(runner, env, mock_controller):
    mock_controller.start.side_effect = ServerAlreadyRunningError("server")

    result = runner.invoke(cli, ["start"], env=env)

    assert result.exit_code == 1
    assert "Failed to start server: tmux session 'server' exists!" in result.output


@pytest.mark.parametrize("args", [["help"], ["--help"], ["-h"]])
def test_help_exits_0(runner, env, args):
    result = runner.invoke(cli, args, env=env)

    assert result.exit_code == 0
    assert "Usage:" in result.output
    assert "toggle" in result.output


def test_unknown_project_name_exits_1(runner, server_dir):
    result = runner.invoke(
        cli, ["stop"], env={"SERVER_DIR": str(server_dir), "PROJECT_NAME": "forge"}
    )

    assert result.exit_code == 1
    assert "Unknown PROJECT_NAME 'forge'" in result.output


def test_get_controller_wires_interactive_confirm(config):
    from mc_server_runner.cli import commands
    from mc_server_runner.cli.utils import confirm_removal

    controller = commands.get_controller(config)

    assert controller.confirm is confirm_removal
    assert controller.config is config


# --- main() exit codes ---


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["mc-server-runner", *args])
    with pytest.raises(SystemExit) as excinfo:
        main()
    return excinfo.value.code


def test_main_unknown_subcommand_exits_1(monkeypatch, server_dir):
    monkeypatch.setenv("SERVER_DIR", str(server_dir))
    assert run_main(monkeypatch, "bogus") == 1


def test_main_help_exits_0(monkeypatch, server_dir):
    monkeypatch.setenv("SERVER_DIR", str(server_dir))
    assert run_main(monkeypatch, "--help") == 0


def test_main_success_exits_0(monkeypatch, server_dir, mock_controller):
    monkeypatch.setenv("SERVER_DIR", str(server_dir))
    assert run_main(monkeypatch, "stop") == 0
    mock_controller.stop.assert_called_once_with()


def test_main_runner_error_exits_1(monkeypatch, server_dir, mock_controller):
    monkeypatch.setenv("SERVER_DIR", str(server_dir))
    mock_controller.stop.side_effect = ServerAlreadyRunningError("server")
    assert run_main(monkeypatch, "stop") == 1


def test_main_unexpected_error_exits_1(monkeypatch, server_dir, mock_controller):
    monkeypatch.setenv("SERVER_DIR", str(server_dir))
    mock_controller.stop.side_effect = RuntimeError("boom")
    assert run_main(monkeypatch, "stop") == 1


# --- utils ---


@patch("mc_server_runner.cli.utils.questionary")
def test_confirm_removal_defaults_to_no(mock_questionary):
    from mc_server_runner.cli.utils import confirm_removal

    mock_questionary.confirm.return_value.ask.return_value = None

    assert confirm_removal("/srv/cache") is False
    mock_questionary.confirm.assert_called_once_with("Remove '/srv/cache'?", default=False)


@patch("mc_server_runner.cli.utils.questionary")
def test_confirm_removal_yes(mock_questionary):
    from mc_server_runner.cli.utils import confirm_removal

    mock_questionary.confirm.return_value.ask.return_value = True

    assert confirm_removal("/srv/cache") is True
