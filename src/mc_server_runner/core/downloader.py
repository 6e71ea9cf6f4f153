# mc_server_runner/core/downloader.py
"""HTTP helpers for the upstream APIs and artifact downloads."""

import os
import logging
import tempfile
from typing import Any

import requests

from .. import __version__
from ..config.const import USER_AGENT
from ..error import DownloadError, FileOperationError, MissingArgumentError

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
_CHUNK_SIZE = 8192


def _headers() -> dict:
    return {"User-Agent": USER_AGENT.format(version=__version__)}


def fetch_json(url: str) -> Any:
    """GETs ``url`` and returns the decoded JSON body.

    Raises:
        DownloadError: On network errors, HTTP errors or a non-JSON body.
    """
    if not url:
        raise MissingArgumentError("url is empty.")

    logger.debug(f"Fetching JSON from {url}")
    try:
        response = requests.get(url, headers=_headers(), timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.RequestException as e:
        raise DownloadError(f"Failed to query {url}: {e}") from e
    except ValueError as e:
        raise DownloadError(f"Invalid JSON received from {url}: {e}") from e


def download_file(url: str, target_file: str) -> str:
    """Streams ``url`` into ``target_file``.

    The body is written to a temporary file in the target's directory and
    renamed over ``target_file`` only once the transfer has completed, so an
    interrupted download never leaves a truncated jar behind.

    Raises:
        MissingArgumentError: If ``url`` or ``target_file`` is empty.
        DownloadError: If the request fails.
        FileOperationError: If the file cannot be written.
    """
    if not url:
        raise MissingArgumentError("download url is empty.")
    if not target_file:
        raise MissingArgumentError("target_file is empty.")

    target_dir = os.path.dirname(os.path.abspath(target_file))
    os.makedirs(target_dir, exist_ok=True)

    logger.info(f"Downloading {url}")
    try:
        response = requests.get(
            url, headers=_headers(), stream=True, timeout=REQUEST_TIMEOUT
        )
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    fd, temp_path = tempfile.mkstemp(
        prefix=".download-", suffix=".part", dir=target_dir
    )
    try:
        try:
            with os.fdopen(fd, "wb") as f:
                for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except requests.exceptions.RequestException as e:
            raise DownloadError(f"Download of {url} was interrupted: {e}") from e
        except OSError as e:
            raise FileOperationError(f"Failed to write '{target_file}': {e}") from e

        try:
            os.replace(temp_path, target_file)
        except OSError as e:
            raise FileOperationError(
                f"Failed to move download into place at '{target_file}': {e}"
            ) from e
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)

    logger.info(f"Saved {os.path.basename(target_file)} to {target_dir}")
    return target_file
