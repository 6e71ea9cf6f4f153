# mc_server_runner/cli/utils.py
"""Interactive helpers shared by the CLI commands."""

import logging

import click
import questionary

from ..error import RunnerError

logger = logging.getLogger(__name__)


def confirm_removal(path: str) -> bool:
    """Asks whether ``path`` may be deleted. Defaults to No.

    Cancelling the prompt (Ctrl+C) counts as No.
    """
    answer = questionary.confirm(f"Remove '{path}'?", default=False).ask()
    logger.debug(f"Removal of '{path}' confirmed: {bool(answer)}")
    return bool(answer)


def handle_runner_error(action: str, error: RunnerError) -> None:
    """Reports a failed action and aborts the command with exit status 1."""
    logger.debug(f"Failed to {action}: {error}", exc_info=True)
    click.secho(f"Failed to {action}: {error}", fg="red")
    raise click.Abort()
