import os
import pytest
import requests
from unittest.mock import patch, MagicMock

from mc_server_runner import __version__
from mc_server_runner.core import downloader
from mc_server_runner.error import (
    DownloadError,
    FileOperationError,
    MissingArgumentError,
)

HEADERS = {"User-Agent": f"mc-server-runner/{__version__}"}

# --- Tests for download_file ---


@patch("requests.get")
def test_download_file_successful(mock_get, tmp_path):
    """Test successful download of a server jar."""
    mock_response = MagicMock()
    mock_response.iter_content.return_value = [b"mock ", b"jar data"]
    mock_response.raise_for_status.return_value = None
    mock_get.return_value = mock_response

    download_url = "http://example.com/paper.jar"
    jar_file = tmp_path / "paper.jar"

    downloader.download_file(download_url, str(jar_file))

    assert jar_file.read_bytes() == b"mock jar data"
    mock_get.assert_called_once_with(
        download_url, headers=HEADERS, stream=True, timeout=30
    )
    # No temporary files are left behind.
    assert os.listdir(tmp_path) == ["paper.jar"]


@patch("requests.get")
def test_download_file_replaces_existing(mock_get, tmp_path):
    mock_response = MagicMock()
    mock_response.iter_content.return_value = [b"new"]
    mock_get.return_value = mock_response
    jar_file = tmp_path / "paper.jar"
    jar_file.write_bytes(b"old")

    downloader.download_file("http://example.com/paper.jar", str(jar_file))

    assert jar_file.read_bytes() == b"new"


@patch("requests.get")
def test_download_file_network_error(mock_get, tmp_path):
    mock_get.side_effect = requests.exceptions.RequestException("Mocked download error")

    with pytest.raises(DownloadError, match="Failed to download"):
        downloader.download_file("http://example.com/paper.jar", str(tmp_path / "p.jar"))


@patch("requests.get")
def test_download_file_http_error_keeps_old_file(mock_get, tmp_path):
    mock_response = MagicMock()
    mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("404")
    mock_get.return_value = mock_response
    jar_file = tmp_path / "paper.jar"
    jar_file.write_bytes(b"old")

    with pytest.raises(DownloadError):
        downloader.download_file("http://example.com/paper.jar", str(jar_file))

    assert jar_file.read_bytes() == b"old"


@patch("requests.get")
def test_download_file_interrupted_stream(mock_get, tmp_path):
    mock_response = MagicMock()
    mock_response.iter_content.side_effect = requests.exceptions.ChunkedEncodingError(
        "connection reset"
    )
    mock_get.return_value = mock_response

    with pytest.raises(DownloadError, match="interrupted"):
        downloader.download_file("http://example.com/paper.jar", str(tmp_path / "p.jar"))

    assert os.listdir(tmp_path) == []


@patch("os.fdopen", side_effect=OSError("Mocked file write error"))
@patch("requests.get")
def test_download_file_write_error(mock_get, mock_fdopen, tmp_path):
    mock_get.return_value = MagicMock()

    with pytest.raises(FileOperationError, match="Failed to write"):
        downloader.download_file("http://example.com/paper.jar", str(tmp_path / "p.jar"))


def test_download_file_missing_url():
    with pytest.raises(MissingArgumentError, match="download url is empty"):
        downloader.download_file("", "dummy.jar")


def test_download_file_missing_target():
    with pytest.raises(MissingArgumentError, match="target_file is empty"):
        downloader.download_file("http://example.com", "")


# --- Tests for fetch_json ---


@patch("requests.get")
def test_fetch_json(mock_get):
    mock_get.return_value.json.return_value = {"versions": ["1.20.1"]}

    assert downloader.fetch_json("http://example.com/api") == {"versions": ["1.20.1"]}
    mock_get.assert_called_once_with("http://example.com/api", headers=HEADERS, timeout=30)


@patch("requests.get")
def test_fetch_json_invalid_body(mock_get):
    mock_get.return_value.json.side_effect = ValueError("Expecting value")

    with pytest.raises(DownloadError, match="Invalid JSON"):
        downloader.fetch_json("http://example.com/api")


@patch("requests.get", side_effect=requests.exceptions.ConnectionError("offline"))
def test_fetch_json_network_error(mock_get):
    with pytest.raises(DownloadError, match="Failed to query"):
        downloader.fetch_json("http://example.com/api")
