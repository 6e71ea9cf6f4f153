import pytest

from mc_server_runner.error import (
    AppFileNotFoundError,
    BuildError,
    CommandNotFoundError,
    MissingArgumentError,
    RunnerError,
    ServerAlreadyRunningError,
)


def test_command_not_found_error_attributes():
    """Test the custom attributes and __str__ of CommandNotFoundError."""
    error = CommandNotFoundError("docker")
    assert error.command_name == "docker"
    assert error.message == "Command not found"
    assert str(error) == "Command not found: docker"

    error2 = CommandNotFoundError("git", "Custom Message")
    assert error2.message == "Custom Message"
    assert str(error2) == "Custom Message: git"


def test_app_file_not_found_error_message():
    error = AppFileNotFoundError("/srv/mc/paper.jar", "Server jar")
    assert error.path == "/srv/mc/paper.jar"
    assert str(error) == "Server jar not found at path: /srv/mc/paper.jar"
    assert isinstance(error, FileNotFoundError)


def test_build_error_carries_returncode():
    error = BuildError("BuildTools failed", returncode=3)
    assert error.returncode == 3
    assert str(error) == "BuildTools failed"
    assert BuildError("no code").returncode is None


def test_server_already_running_error_names_session():
    error = ServerAlreadyRunningError("survival")
    assert error.session_name == "survival"
    assert "tmux session 'survival' exists" in str(error)


@pytest.mark.parametrize(
    "error",
    [
        CommandNotFoundError("tmux"),
        AppFileNotFoundError("/x"),
        BuildError("x"),
        ServerAlreadyRunningError("x"),
        MissingArgumentError("x"),
    ],
)
def test_all_errors_inherit_from_runner_error(error):
    assert isinstance(error, RunnerError)


def test_missing_argument_error_is_value_error():
    assert isinstance(MissingArgumentError("x"), ValueError)
