# mc_server_runner/__main__.py
"""
Main entry point for the MC Server Runner command-line interface.

Resolves the effective configuration, sets up logging and dispatches to the
lifecycle commands. Without a subcommand the server is toggled: stopped when
its tmux session is live, started otherwise.
"""

import logging
import sys

import click
from colorama import just_fix_windows_console

from . import __version__
from .cli import commands
from .config import app_name_title, resolve_config
from .error import RunnerError
from .logging import log_separator, setup_logging


@click.group(
    invoke_without_command=True,
    context_settings=dict(help_option_names=["-h", "--help"]),
)
@click.version_option(
    __version__, "-v", "--version", message=f"{app_name_title} %(version)s"
)
@click.pass_context
def cli(ctx: click.Context):
    """Deploys and runs a Paper, Velocity, Folia or Spigot Minecraft server.

    The flavor is chosen with the PROJECT_NAME setting (environment variable
    or config file). If no command is given, 'toggle' is used.
    """
    if ctx.resilient_parsing:
        return

    try:
        config = resolve_config()
    except RunnerError as e:
        click.secho(f"Configuration error: {e}", fg="red")
        raise click.Abort()

    logger = setup_logging(
        log_dir=config.log_dir,
        file_log_level=config.log_level,
        cli_log_level=config.log_level,
        force_reconfigure=True,
    )
    log_separator(logger, app_name=app_name_title, app_version=__version__)
    logger.debug(f"Starting {app_name_title} v{__version__} (flavor: {config.flavor})")
    if config.config_file:
        logger.debug(f"Configuration file: {config.config_file}")

    ctx.obj = {"config": config, "cli": cli}

    if ctx.invoked_subcommand is None:
        ctx.invoke(commands.toggle_server)


def _add_commands_to_cli():
    cli.add_command(commands.start_server)
    cli.add_command(commands.stop_server)
    cli.add_command(commands.restart_server)
    cli.add_command(commands.toggle_server)
    cli.add_command(commands.show_help)


_add_commands_to_cli()


def main():
    """Runs the CLI and maps every failure to exit status 1."""
    just_fix_windows_console()
    try:
        exit_code = cli.main(prog_name="mc-server-runner", standalone_mode=False)
    except click.UsageError as e:
        e.show()
        sys.exit(1)
    except click.Abort:
        sys.exit(1)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except Exception as e:
        logger = logging.getLogger("mc_server_runner")
        logger.critical("A fatal, unhandled error occurred.", exc_info=True)
        click.secho(
            f"\nFATAL UNHANDLED ERROR: {type(e).__name__}: {e}", fg="red", bold=True
        )
        click.secho("Please check the logs for more details.", fg="yellow")
        sys.exit(1)
    sys.exit(exit_code if isinstance(exit_code, int) else 0)


if __name__ == "__main__":
    main()
