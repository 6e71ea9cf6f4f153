# mc_server_runner/core/system/tmux.py
"""
Thin wrapper over the tmux primitives the lifecycle controller needs:
session-exists, create, send-keys and kill. A session's existence is the
only running/not-running signal; the server process inside is not inspected.
"""

import shlex
import shutil
import logging
import subprocess
from typing import List, Optional

from ...error import CommandNotFoundError, MissingArgumentError, ServerStartError

logger = logging.getLogger(__name__)


class TmuxSessionManager:
    """Manages named, detached tmux sessions."""

    def __init__(self, tmux_cmd: str = "tmux"):
        self.tmux_cmd = tmux_cmd

    def is_available(self) -> bool:
        return shutil.which(self.tmux_cmd) is not None

    def has_session(self, name: str) -> bool:
        if not name:
            raise MissingArgumentError("Session name cannot be empty.")
        try:
            result = subprocess.run(
                [self.tmux_cmd, "has-session", "-t", name],
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            logger.debug(f"'{self.tmux_cmd}' not found while checking session '{name}'.")
            return False
        return result.returncode == 0

    def new_session(self, name: str, command: List[str], cwd: Optional[str] = None) -> None:
        """Starts ``command`` in a new detached session called ``name``.

        Raises:
            CommandNotFoundError: If tmux is not installed.
            ServerStartError: If tmux refuses to create the session.
        """
        if not name:
            raise MissingArgumentError("Session name cannot be empty.")
        if not command:
            raise MissingArgumentError("Command for the new session cannot be empty.")

        tmux_args = [self.tmux_cmd, "new-session", "-d", "-s", name]
        if cwd:
            tmux_args += ["-c", cwd]
        tmux_args.append(shlex.join(command))

        logger.debug(f"Creating tmux session: {tmux_args}")
        try:
            subprocess.run(tmux_args, check=True, capture_output=True, text=True)
        except FileNotFoundError:
            raise CommandNotFoundError(self.tmux_cmd) from None
        except subprocess.CalledProcessError as e:
            raise ServerStartError(
                f"Failed to create tmux session '{name}': {(e.stderr or '').strip()}"
            ) from e

    def send_keys(self, name: str, keys: str) -> None:
        """Types ``keys`` followed by Enter into the session."""
        subprocess.run(
            [self.tmux_cmd, "send-keys", "-t", name, keys, "C-m"],
            check=True,
            capture_output=True,
            text=True,
        )

    def kill_session(self, name: str) -> None:
        subprocess.run(
            [self.tmux_cmd, "kill-session", "-t", name],
            check=True,
            capture_output=True,
            text=True,
        )
