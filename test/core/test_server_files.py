import pytest

from mc_server_runner.core.server_files import (
    ensure_eula,
    read_version_record,
    write_version_record,
)


def test_read_version_record_missing(tmp_path):
    assert read_version_record(str(tmp_path / "current_version.txt")) is None


def test_read_version_record_empty_means_no_record(tmp_path):
    record = tmp_path / "current_version.txt"
    record.write_text("  \n")
    assert read_version_record(str(record)) is None


def test_version_record_round_trip(tmp_path):
    record = tmp_path / "current_version.txt"
    write_version_record(str(record), "1.20.2")

    assert record.read_text() == "1.20.2\n"
    assert read_version_record(str(record)) == "1.20.2"


def test_ensure_eula_creates_file(tmp_path):
    eula = tmp_path / "eula.txt"

    assert ensure_eula(str(eula), auto_accept=True) is True
    assert eula.read_text() == "eula=true\n"


def test_ensure_eula_flips_false(tmp_path):
    eula = tmp_path / "eula.txt"
    eula.write_text("#By changing the setting below to TRUE you agree\neula=false\n")

    assert ensure_eula(str(eula), auto_accept=True) is True
    assert eula.read_text() == "#By changing the setting below to TRUE you agree\neula=true\n"


def test_ensure_eula_leaves_accepted_file(tmp_path):
    eula = tmp_path / "eula.txt"
    eula.write_text("eula=true\n")

    assert ensure_eula(str(eula), auto_accept=True) is False
    assert eula.read_text() == "eula=true\n"


def test_ensure_eula_disabled(tmp_path):
    eula = tmp_path / "eula.txt"
    eula.write_text("eula=false\n")

    assert ensure_eula(str(eula), auto_accept=False) is False
    assert eula.read_text() == "eula=false\n"
    assert ensure_eula(str(tmp_path / "absent.txt"), auto_accept=False) is False
    assert not (tmp_path / "absent.txt").exists()
