import os
import pytest
from unittest.mock import patch, MagicMock

from mc_server_runner.core.system import base
from mc_server_runner.error import (
    AppFileNotFoundError,
    CommandNotFoundError,
    MissingArgumentError,
)

# --- require_commands ---


def test_require_commands_all_present():
    with patch("shutil.which", return_value="/usr/bin/tool"):
        base.require_commands(["git", "docker"])  # Should not raise


def test_require_commands_reports_first_missing():
    with patch("shutil.which", side_effect=lambda cmd: None if cmd == "docker" else "/x"):
        with pytest.raises(CommandNotFoundError) as excinfo:
            base.require_commands(["git", "docker"], reason="to build Folia")

    assert excinfo.value.command_name == "docker"
    assert "'docker' is required to build Folia" in str(excinfo.value)


def test_is_command_available_empty():
    assert base.is_command_available("") is False


# --- WSL detection / connection info ---


def test_is_wsl_detects_microsoft_kernel(tmp_path):
    proc_version = tmp_path / "version"
    proc_version.write_text("Linux version 5.15.90.1-microsoft-standard-WSL2")
    assert base.is_wsl(str(proc_version)) is True


def test_is_wsl_false_for_plain_linux_or_missing_file(tmp_path):
    proc_version = tmp_path / "version"
    proc_version.write_text("Linux version 6.5.0-generic (buildd@ubuntu)")
    assert base.is_wsl(str(proc_version)) is False
    assert base.is_wsl(str(tmp_path / "missing")) is False


def test_connection_info_non_wsl(tmp_path):
    lines = base.connection_info_lines(str(tmp_path / "missing"))
    assert len(lines) == 3
    assert lines[1] == "NON-WSL ENVIRONMENT! Use localhost:25565 to connect."


@patch("mc_server_runner.core.system.base.subprocess.run")
def test_connection_info_wsl_uses_first_ip(mock_run, tmp_path):
    proc_version = tmp_path / "version"
    proc_version.write_text("Linux version 5.15-Microsoft")
    mock_run.return_value = MagicMock(stdout="172.20.1.5 10.0.0.2\n")

    lines = base.connection_info_lines(str(proc_version))

    assert "Use 172.20.1.5:25565 to connect from your Windows host." in lines[1]


@patch("mc_server_runner.core.system.base.subprocess.run")
def test_connection_info_wsl_without_ip(mock_run, tmp_path):
    proc_version = tmp_path / "version"
    proc_version.write_text("WSL")
    mock_run.return_value = MagicMock(stdout="")

    lines = base.connection_info_lines(str(proc_version))

    assert "(WSL IP not detected automatically)" in lines[1]


# --- delete_path_robustly / mirror_directory ---


def test_delete_path_robustly_file_and_dir(tmp_path):
    file_path = tmp_path / "a.txt"
    file_path.write_text("x")
    dir_path = tmp_path / "tree"
    (dir_path / "nested").mkdir(parents=True)
    (dir_path / "nested" / "b.txt").write_text("y")

    base.delete_path_robustly(str(file_path), "file")
    base.delete_path_robustly(str(dir_path), "directory")

    assert not file_path.exists()
    assert not dir_path.exists()


def test_delete_path_robustly_missing_is_noop(tmp_path):
    base.delete_path_robustly(str(tmp_path / "absent"), "thing")


def test_delete_path_robustly_empty_path():
    with pytest.raises(MissingArgumentError):
        base.delete_path_robustly("", "thing")


def test_mirror_directory_removes_stale_entries(tmp_path):
    source = tmp_path / "src"
    (source / "sub").mkdir(parents=True)
    (source / "keep.txt").write_text("new")
    (source / "sub" / "inner.txt").write_text("inner")

    target = tmp_path / "ctx"
    target.mkdir()
    (target / "stale.txt").write_text("old")
    (target / "keep.txt").write_text("old")

    base.mirror_directory(str(source), str(target))

    assert sorted(os.listdir(target)) == ["keep.txt", "sub"]
    assert (target / "keep.txt").read_text() == "new"
    assert (target / "sub" / "inner.txt").read_text() == "inner"


def test_mirror_directory_missing_source(tmp_path):
    with pytest.raises(AppFileNotFoundError):
        base.mirror_directory(str(tmp_path / "nope"), str(tmp_path / "ctx"))
