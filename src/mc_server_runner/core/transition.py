# mc_server_runner/core/transition.py
"""Backs up world data and cleans the server directory on a version change.

Worlds generated by one game version are not guaranteed to load cleanly in
another, so when the deployed version changes the world folders are moved
into a timestamped backup directory. Every other top-level entry that is not
explicitly protected is offered for deletion, one confirmation per entry.
"""

import os
import sys
import random
import shutil
import fnmatch
import logging
from datetime import datetime
from typing import Callable, List, Optional

from .flavor import Flavor
from .system.base import delete_path_robustly
from ..config.settings import EffectiveConfig
from ..config.const import (
    CONFIG_FILE_NAME,
    EULA_FILE_NAME,
    PLUGINS_DIR_NAME,
    SERVER_PROPERTIES_FILE_NAME,
    VERSION_FILE_NAME,
)
from ..error import FileOperationError

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]


def should_transition(
    flavor: Flavor, old_version: Optional[str], new_version: Optional[str]
) -> bool:
    """Whether a backup-and-clean is due for this deployment."""
    if not flavor.carries_version:
        logger.info(f"Skipping backup/clean (PROJECT_NAME={flavor}).")
        return False
    if old_version is None:
        logger.info(f"No {VERSION_FILE_NAME}; skipping backup/clean.")
        return False
    if not new_version or new_version == old_version:
        logger.info("No version change or version not specified => no backup/clean.")
        return False
    return True


def backup_dir_name(world_name: str, old_version: str, now: Optional[datetime] = None) -> str:
    timestamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return f"{world_name}-{old_version}-{timestamp}-{random.randint(0, 9999)}"


def protected_names(
    config: EffectiveConfig, backup_dir: str, launcher_name: Optional[str] = None
) -> List[str]:
    """Names (or glob patterns) in the server dir that are never offered for deletion."""
    launcher = launcher_name if launcher_name is not None else os.path.basename(sys.argv[0])
    names = [
        os.path.basename(backup_dir),
        f"{config.world_name}-*",
        PLUGINS_DIR_NAME,
        SERVER_PROPERTIES_FILE_NAME,
        EULA_FILE_NAME,
        VERSION_FILE_NAME,
        CONFIG_FILE_NAME,
    ]
    if launcher:
        names.append(launcher)
    return names


def _is_protected(name: str, patterns: List[str]) -> bool:
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)


def backup_and_clean(
    config: EffectiveConfig,
    old_version: str,
    new_version: str,
    confirm: ConfirmCallback,
    launcher_name: Optional[str] = None,
) -> str:
    """Moves the world folders into a new backup dir and offers the rest for deletion.

    Args:
        config: The effective configuration.
        old_version: Version named by the version record.
        new_version: Version about to be deployed.
        confirm: Called with the full path of each unprotected entry; the entry
            is deleted only if it returns True.
        launcher_name: File name of the launcher to protect. Defaults to the
            base name of ``sys.argv[0]``.

    Returns:
        The path of the backup directory.

    Raises:
        FileOperationError: If the backup directory cannot be created or a
            world folder cannot be moved.
    """
    server_dir = config.server_dir
    logger.info(f"Version changed from '{old_version}' to '{new_version}'.")
    logger.info("Backup + clean...")

    backup_dir = os.path.join(server_dir, backup_dir_name(config.world_name, old_version))
    try:
        os.makedirs(backup_dir)
    except OSError as e:
        raise FileOperationError(f"Failed to create backup directory '{backup_dir}': {e}") from e

    for folder in config.world_folders:
        source = os.path.join(server_dir, folder)
        if not os.path.isdir(source):
            continue
        logger.info(f"Backing up '{folder}' => '{backup_dir}'")
        try:
            shutil.move(source, os.path.join(backup_dir, folder))
        except OSError as e:
            raise FileOperationError(f"Failed to back up '{source}': {e}") from e

    logger.info("Wiping server dir except critical files...")
    patterns = protected_names(config, backup_dir, launcher_name)
    for name in sorted(os.listdir(server_dir)):
        if _is_protected(name, patterns):
            logger.debug(f"Keeping protected entry '{name}'.")
            continue
        item = os.path.join(server_dir, name)
        if confirm(item):
            delete_path_robustly(item, "server directory entry")
            logger.info(f"Removed '{item}'.")
        else:
            logger.debug(f"Kept '{item}'.")

    return backup_dir


def maybe_transition(
    config: EffectiveConfig,
    flavor: Flavor,
    old_version: Optional[str],
    new_version: Optional[str],
    confirm: ConfirmCallback,
    launcher_name: Optional[str] = None,
) -> Optional[str]:
    """Runs :func:`backup_and_clean` when the deployed version changes.

    Returns:
        The backup directory, or None when nothing was done.
    """
    if not should_transition(flavor, old_version, new_version):
        return None
    return backup_and_clean(config, old_version, new_version, confirm, launcher_name)
