# mc_server_runner/core/system/base.py
"""Provides environment probes and filesystem helpers.

Includes tool-availability checks used before any state is touched, WSL
detection for the post-launch connection hint, and the robust delete and
directory-mirroring helpers used by the providers and the transition guard.
"""

import os
import re
import shutil
import stat
import logging
import subprocess
from typing import Iterable, List, Optional

from ...config.const import MINECRAFT_PORT
from ...error import (
    CommandNotFoundError,
    FileOperationError,
    MissingArgumentError,
    AppFileNotFoundError,
)

logger = logging.getLogger(__name__)

_WSL_PATTERN = re.compile(r"(microsoft|wsl)", re.IGNORECASE)


def is_command_available(command: str) -> bool:
    """Returns True if ``command`` resolves to an executable (name or path)."""
    if not command:
        return False
    return shutil.which(command) is not None


def require_commands(commands: Iterable[str], reason: str = "") -> None:
    """Raises on the first command in ``commands`` that is not available.

    Raises:
        CommandNotFoundError: If a command is missing.
    """
    for command in commands:
        if is_command_available(command):
            logger.debug(f"Found required command '{command}'.")
            continue
        message = f"'{command}' is required"
        if reason:
            message += f" {reason}"
        message += ". Install it with your package manager first"
        logger.error(f"{message}: {command}")
        raise CommandNotFoundError(command, message=message)


def is_wsl(proc_version_path: str = "/proc/version") -> bool:
    """Detects Windows Subsystem for Linux from the kernel version string."""
    try:
        with open(proc_version_path, "r", encoding="utf-8", errors="replace") as f:
            return bool(_WSL_PATTERN.search(f.read()))
    except OSError:
        return False


def get_primary_ip() -> Optional[str]:
    """Returns the first address reported by ``hostname -I``, if any."""
    try:
        result = subprocess.run(
            ["hostname", "-I"], capture_output=True, text=True, check=False
        )
    except OSError as e:
        logger.debug(f"Could not run 'hostname -I': {e}")
        return None
    addresses = result.stdout.split()
    return addresses[0] if addresses else None


def connection_info_lines(proc_version_path: str = "/proc/version") -> List[str]:
    """Builds the banner telling the operator where to connect."""
    separator = "=" * 54
    if is_wsl(proc_version_path):
        ip_addr = get_primary_ip() or "(WSL IP not detected automatically)"
        message = f"WSL DETECTED! Use {ip_addr}:{MINECRAFT_PORT} to connect from your Windows host."
    else:
        message = f"NON-WSL ENVIRONMENT! Use localhost:{MINECRAFT_PORT} to connect."
    return [separator, message, separator]


def _handle_remove_readonly_onerror(func, path, exc_info):
    """Clears the read-only bit and retries a failed removal."""
    if not os.access(path, os.W_OK):
        os.chmod(path, stat.S_IWUSR | stat.S_IRUSR)
        func(path)
    else:
        raise exc_info[1]


def delete_path_robustly(path_to_delete: str, item_description: str) -> None:
    """Deletes a file, symlink or directory tree.

    Raises:
        MissingArgumentError: If the path is empty.
        FileOperationError: If deletion fails.
    """
    if not path_to_delete:
        raise MissingArgumentError("Path to delete cannot be empty.")
    if not os.path.lexists(path_to_delete):
        logger.debug(f"{item_description} '{path_to_delete}' does not exist.")
        return

    try:
        if os.path.isdir(path_to_delete) and not os.path.islink(path_to_delete):
            shutil.rmtree(path_to_delete, onerror=_handle_remove_readonly_onerror)
        else:
            os.remove(path_to_delete)
        logger.debug(f"Deleted {item_description}: '{path_to_delete}'")
    except OSError as e:
        raise FileOperationError(
            f"Failed to delete {item_description} '{path_to_delete}': {e}"
        ) from e


def mirror_directory(source_dir: str, target_dir: str) -> None:
    """Makes ``target_dir`` an exact copy of ``source_dir``.

    Any previous content of the target is removed so files deleted upstream
    do not linger in the copy.

    Raises:
        AppFileNotFoundError: If ``source_dir`` does not exist.
        FileOperationError: If copying fails.
    """
    if not os.path.isdir(source_dir):
        raise AppFileNotFoundError(source_dir, "Source directory")

    delete_path_robustly(target_dir, "previous build context")
    try:
        shutil.copytree(source_dir, target_dir, symlinks=True)
    except (OSError, shutil.Error) as e:
        raise FileOperationError(
            f"Failed to mirror '{source_dir}' into '{target_dir}': {e}"
        ) from e
    logger.debug(f"Mirrored '{source_dir}' into '{target_dir}'.")
