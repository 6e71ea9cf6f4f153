# mc_server_runner/core/server_files.py
"""Small state files kept inside the server directory.

``current_version.txt`` records the last version that was deployed
successfully; ``eula.txt`` holds the Mojang EULA acceptance flag.
"""

import os
import re
import logging
from typing import Optional

from ..error import FileOperationError

logger = logging.getLogger(__name__)

_EULA_FALSE = re.compile(r"^\s*eula\s*=\s*false\s*$", re.IGNORECASE | re.MULTILINE)


def read_version_record(version_file: str) -> Optional[str]:
    """Returns the recorded version, or None if there is no prior deployment.

    A missing file and a file with only whitespace both mean "no record".
    """
    if not os.path.isfile(version_file):
        logger.debug(f"No version record at '{version_file}'.")
        return None
    try:
        with open(version_file, "r", encoding="utf-8") as f:
            content = f.read().strip()
    except OSError as e:
        logger.warning(f"Could not read version record '{version_file}': {e}")
        return None
    return content or None


def write_version_record(version_file: str, version: str) -> None:
    """Overwrites the version record with ``version``.

    Raises:
        FileOperationError: If the file cannot be written.
    """
    try:
        with open(version_file, "w", encoding="utf-8") as f:
            f.write(f"{version}\n")
    except OSError as e:
        raise FileOperationError(
            f"Failed to write version record '{version_file}': {e}"
        ) from e
    logger.debug(f"Recorded deployed version '{version}' in '{version_file}'.")


def ensure_eula(eula_file: str, auto_accept: bool) -> bool:
    """Makes sure ``eula.txt`` accepts the EULA when auto-accept is enabled.

    A missing file is created with ``eula=true``; an existing ``eula=false``
    line is flipped. Any other content is left alone.

    Returns:
        True if the file was created or modified.
    """
    if not auto_accept:
        logger.debug("EULA auto-accept disabled; leaving eula.txt untouched.")
        return False

    try:
        if not os.path.exists(eula_file):
            with open(eula_file, "w", encoding="utf-8") as f:
                f.write("eula=true\n")
            logger.info(f"Created {eula_file} with eula=true.")
            return True

        with open(eula_file, "r", encoding="utf-8") as f:
            content = f.read()
        if not _EULA_FALSE.search(content):
            return False

        with open(eula_file, "w", encoding="utf-8") as f:
            f.write(_EULA_FALSE.sub("eula=true", content))
        logger.info(f"Accepted the EULA in {eula_file}.")
        return True
    except OSError as e:
        raise FileOperationError(f"Failed to update '{eula_file}': {e}") from e
