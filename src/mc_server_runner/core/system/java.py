# mc_server_runner/core/system/java.py
"""Java runtime detection."""

import re
import logging
import subprocess
from typing import Optional

logger = logging.getLogger(__name__)

# `java -version` prints e.g. `openjdk version "17.0.8" 2023-07-18` on stderr.
_QUOTED_VERSION = re.compile(r'"([0-9][^"]*)"')
_BARE_VERSION = re.compile(r"\b([0-9]+(?:\.[0-9]+)*(?:_[0-9]+)?)\b")


def parse_java_major_version(version_output: str) -> Optional[int]:
    """Extracts the Java major version from ``java -version`` output.

    Legacy ``1.x`` versions map to ``x`` (``1.8.0_392`` -> 8); modern versions
    use their first component (``17.0.8`` -> 17). Returns None when no version
    can be found.
    """
    if not version_output:
        return None

    first_line = version_output.strip().splitlines()[0] if version_output.strip() else ""
    match = _QUOTED_VERSION.search(first_line) or _BARE_VERSION.search(first_line)
    if not match:
        return None

    raw_version = match.group(1)
    legacy = re.match(r"^1\.([0-9]+)", raw_version)
    major = legacy.group(1) if legacy else re.split(r"[._+-]", raw_version)[0]
    try:
        return int(major)
    except ValueError:
        return None


def detect_java_major_version(java_cmd: str) -> Optional[int]:
    """Runs ``<java_cmd> -version`` and returns the major version, if known."""
    try:
        result = subprocess.run(
            [java_cmd, "-version"], capture_output=True, text=True, check=False
        )
    except OSError as e:
        logger.warning(f"Could not run '{java_cmd} -version': {e}")
        return None

    # Most JVMs print the banner on stderr; some wrappers use stdout.
    major = parse_java_major_version(result.stderr) or parse_java_major_version(
        result.stdout
    )
    if major is None:
        logger.warning(f"Could not determine Java version from '{java_cmd}'.")
    else:
        logger.info(f"Detected Java major version: {major}")
    return major
