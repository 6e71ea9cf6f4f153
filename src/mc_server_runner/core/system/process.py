# mc_server_runner/core/system/process.py
"""Process hand-off helpers.

Two code paths end with the runner giving up its own process: ``start``
without tmux (the JVM takes over the terminal) and ``restart`` (a fresh
``start`` invocation takes over). Both go through :class:`ProcessHandoff`, the
single place where ``exec`` happens, so callers and tests can substitute it.
"""

import os
import sys
import logging
from typing import List, NoReturn, Optional, Sequence

from ...error import MissingArgumentError, ServerStartError

logger = logging.getLogger(__name__)


def build_self_command(args: Sequence[str]) -> List[str]:
    """Returns the argv that re-runs this program with ``args``."""
    return [sys.executable, "-m", "mc_server_runner", *args]


def _flush_logging() -> None:
    for handler in logging.getLogger("mc_server_runner").handlers:
        try:
            handler.flush()
        except (OSError, ValueError):
            pass
    sys.stdout.flush()
    sys.stderr.flush()


class ProcessHandoff:
    """Replaces the current process image with another program.

    Nothing runs after a successful :meth:`replace`; the new program inherits
    the terminal, the environment and the process ID.
    """

    def replace(self, command: List[str], cwd: Optional[str] = None) -> NoReturn:
        """Executes ``command`` in place of the current process.

        Args:
            command: Program and arguments. ``command[0]`` is looked up on PATH.
            cwd: Directory to change into before executing.

        Raises:
            MissingArgumentError: If ``command`` is empty.
            ServerStartError: If the program cannot be executed.
        """
        if not command:
            raise MissingArgumentError("Command to execute cannot be empty.")

        logger.debug(f"Handing off process to: {' '.join(command)} (cwd={cwd})")
        try:
            if cwd:
                os.chdir(cwd)
            _flush_logging()
            os.execvp(command[0], command)
        except OSError as e:
            raise ServerStartError(
                f"Failed to execute '{command[0]}': {e}"
            ) from e
