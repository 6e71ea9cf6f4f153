# mc_server_runner/config/settings.py
"""Resolves the runner's effective configuration.

Settings come from three layers, highest priority first:

1. A non-empty process environment variable with the setting's name.
2. The first config file found among the candidates (the server directory's
   ``mc-server-runner.conf``, the per-user config dir, then ``/etc``).
   Only that one file is read; later candidates are ignored even when the
   first file leaves keys unset.
3. Built-in defaults.

The result is an immutable :class:`EffectiveConfig` built once at startup and
handed to every component. Nothing below the CLI reads ``os.environ`` itself.
"""

import os
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from appdirs import user_config_dir, user_log_dir

from ..core.flavor import Flavor
from .const import (
    package_name,
    app_author,
    CONFIG_FILE_NAME,
    SYSTEM_CONFIG_PATH,
    VERSION_FILE_NAME,
    EULA_FILE_NAME,
    DEFAULT_STOP_GRACE_SECONDS,
)

logger = logging.getLogger(__name__)

# Keys accepted from the environment and from config files. Anything else in a
# config file is ignored.
ALLOWED_KEYS = (
    "SERVER_DIR",
    "PROJECT_NAME",
    "DEFAULT_WORLD_NAME",
    "DEFAULT_XMS",
    "DEFAULT_XMX",
    "JAVA_CMD",
    "FOLIA_SRC_DIR",
    "FOLIA_GIT_URL",
    "FOLIA_BRANCH",
    "FOLIA_DOCKER_CTX",
    "SPIGOT_BUILD_DIR",
    "TMUX_SESSION_NAME",
    "EULA_AUTO_ACCEPT",
    "RUNNER_LOG_DIR",
    "RUNNER_LOG_LEVEL",
    "STOP_GRACE_SECONDS",
)

# SPIGOT_BUILD_DIR, TMUX_SESSION_NAME and RUNNER_LOG_DIR are derived when unset.
DEFAULTS: Dict[str, str] = {
    "SERVER_DIR": "/tmp/wwc_test_server",
    "PROJECT_NAME": "paper",
    "DEFAULT_WORLD_NAME": "world",
    "DEFAULT_XMS": "2G",
    "DEFAULT_XMX": "2G",
    "JAVA_CMD": "java",
    "FOLIA_SRC_DIR": "/home/minecraft/FoliaSource",
    "FOLIA_GIT_URL": "https://github.com/PaperMC/Folia.git",
    "FOLIA_BRANCH": "dev/hard-fork",
    "FOLIA_DOCKER_CTX": "/home/minecraft/folia_docker_build",
    "EULA_AUTO_ACCEPT": "true",
    "RUNNER_LOG_LEVEL": "INFO",
    "STOP_GRACE_SECONDS": str(DEFAULT_STOP_GRACE_SECONDS),
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class EffectiveConfig:
    """Fully resolved settings for one invocation."""

    server_dir: str
    flavor: Flavor
    world_name: str
    xms: str
    xmx: str
    java_cmd: str
    folia_src_dir: str
    folia_git_url: str
    folia_branch: str
    folia_docker_ctx: str
    spigot_build_dir: str
    session_name: str
    eula_auto_accept: bool
    log_dir: str
    log_level: int
    stop_grace_seconds: float
    config_file: Optional[str] = None

    @property
    def version_file(self) -> str:
        return os.path.join(self.server_dir, VERSION_FILE_NAME)

    @property
    def eula_file(self) -> str:
        return os.path.join(self.server_dir, EULA_FILE_NAME)

    @property
    def world_folders(self) -> List[str]:
        """The primary world folder followed by its nether and end variants."""
        return [
            self.world_name,
            f"{self.world_name}_nether",
            f"{self.world_name}_the_end",
        ]


def default_config_candidates(server_dir: str) -> List[str]:
    """Returns candidate config files, most specific first."""
    return [
        os.path.join(server_dir, CONFIG_FILE_NAME),
        os.path.join(user_config_dir(package_name, app_author), CONFIG_FILE_NAME),
        SYSTEM_CONFIG_PATH,
    ]


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_config_file(path: str) -> Dict[str, str]:
    """Parses a ``key=value`` file into a dict of allow-listed keys.

    Blank lines and ``#`` comments are skipped, whitespace around keys and
    values is stripped and a value wrapped in matching quotes is unquoted.
    An unreadable file yields an empty dict.
    """
    values: Dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.readlines()
    except OSError as e:
        logger.warning(f"Could not read config file '{path}': {e}. Using defaults.")
        return values

    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            logger.debug(f"{path}:{line_number}: ignoring line without '='.")
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key not in ALLOWED_KEYS:
            logger.debug(f"{path}:{line_number}: ignoring unknown key '{key}'.")
            continue
        values[key] = _strip_quotes(value.strip())
    return values


def find_config_file(candidates: Iterable[str]) -> Optional[str]:
    """Returns the first candidate that exists as a regular file."""
    for candidate in candidates:
        if candidate and os.path.isfile(candidate):
            return candidate
    return None


def _parse_bool(key: str, value: str, default: bool) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    logger.warning(f"Invalid boolean '{value}' for {key}. Using {default}.")
    return default


def _parse_log_level(value: str) -> int:
    candidate = value.strip()
    if candidate.isdigit():
        return int(candidate)
    level = logging.getLevelName(candidate.upper())
    if isinstance(level, int):
        return level
    logger.warning(f"Invalid RUNNER_LOG_LEVEL '{value}'. Using INFO.")
    return logging.INFO


def _parse_seconds(value: str) -> float:
    try:
        seconds = float(value)
        if seconds < 0:
            raise ValueError("negative")
        return seconds
    except ValueError:
        logger.warning(
            f"Invalid STOP_GRACE_SECONDS '{value}'. Using {DEFAULT_STOP_GRACE_SECONDS}."
        )
        return DEFAULT_STOP_GRACE_SECONDS


def resolve_config(
    environ: Optional[Mapping[str, str]] = None,
    candidates: Optional[List[str]] = None,
) -> EffectiveConfig:
    """Builds the :class:`EffectiveConfig` from environment, file and defaults.

    Args:
        environ: Mapping to read variables from. Defaults to ``os.environ``.
        candidates: Config files to consider, in priority order. Defaults to
            :func:`default_config_candidates` for the server directory named
            by the environment (or the built-in default).

    Returns:
        The resolved, immutable configuration.

    Raises:
        ConfigurationError: If ``PROJECT_NAME`` names an unknown flavor.
    """
    env = os.environ if environ is None else environ

    def from_env(key: str) -> Optional[str]:
        value = env.get(key)
        return value if value else None

    server_dir_hint = os.path.abspath(
        os.path.expanduser(from_env("SERVER_DIR") or DEFAULTS["SERVER_DIR"])
    )
    if candidates is None:
        candidates = default_config_candidates(server_dir_hint)

    config_file = find_config_file(candidates)
    file_values: Dict[str, str] = {}
    if config_file:
        logger.debug(f"Reading configuration from '{config_file}'.")
        file_values = parse_config_file(config_file)
    else:
        logger.debug("No configuration file found. Using environment and defaults.")

    def pick(key: str) -> Optional[str]:
        env_value = from_env(key)
        if env_value is not None:
            return env_value
        if file_values.get(key):
            return file_values[key]
        return DEFAULTS.get(key)

    server_dir = os.path.abspath(os.path.expanduser(pick("SERVER_DIR")))

    return EffectiveConfig(
        server_dir=server_dir,
        flavor=Flavor.parse(pick("PROJECT_NAME")),
        world_name=pick("DEFAULT_WORLD_NAME"),
        xms=pick("DEFAULT_XMS"),
        xmx=pick("DEFAULT_XMX"),
        java_cmd=pick("JAVA_CMD"),
        folia_src_dir=os.path.expanduser(pick("FOLIA_SRC_DIR")),
        folia_git_url=pick("FOLIA_GIT_URL"),
        folia_branch=pick("FOLIA_BRANCH"),
        folia_docker_ctx=os.path.expanduser(pick("FOLIA_DOCKER_CTX")),
        spigot_build_dir=os.path.expanduser(
            pick("SPIGOT_BUILD_DIR") or os.path.join(server_dir, "buildtools")
        ),
        session_name=pick("TMUX_SESSION_NAME") or os.path.basename(server_dir),
        eula_auto_accept=_parse_bool(
            "EULA_AUTO_ACCEPT", pick("EULA_AUTO_ACCEPT"), default=True
        ),
        log_dir=os.path.expanduser(
            pick("RUNNER_LOG_DIR") or user_log_dir(package_name, app_author)
        ),
        log_level=_parse_log_level(pick("RUNNER_LOG_LEVEL")),
        stop_grace_seconds=_parse_seconds(pick("STOP_GRACE_SECONDS")),
        config_file=config_file,
    )
