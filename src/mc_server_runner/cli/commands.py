# mc_server_runner/cli/commands.py
"""
Click commands for the server lifecycle: start, stop, restart, toggle and help.

``start``, ``restart`` and ``toggle`` share the same arguments: an optional
game version and build number followed by the launch options.
"""

import logging
from typing import Optional

import click

from ..config.settings import EffectiveConfig
from ..core.lifecycle import LaunchRequest, LifecycleController
from ..core.system.process import ProcessHandoff
from ..core.system.tmux import TmuxSessionManager
from ..error import RunnerError
from .utils import confirm_removal, handle_runner_error

logger = logging.getLogger(__name__)


_LAUNCH_PARAMS = (
    click.argument("mc_version", required=False),
    click.argument("build_number", required=False),
    click.option(
        "--no-update",
        "no_update",
        is_flag=True,
        help="Reuse existing jars; never re-download or rebuild them.",
    ),
    click.option("--xms", metavar="SIZE", help="Initial heap size, e.g. 2G."),
    click.option("--xmx", metavar="SIZE", help="Maximum heap size, e.g. 4G."),
    click.option("--java-cmd", "java_cmd", metavar="PATH", help="Java executable to use."),
    click.option(
        "--no-tmux",
        "no_tmux",
        is_flag=True,
        help="Run in the foreground instead of a tmux session.",
    ),
)


def launch_options(func):
    """Adds the arguments shared by the commands that may start the server."""
    for decorator in reversed(_LAUNCH_PARAMS):
        func = decorator(func)
    return func


def build_request(
    mc_version: Optional[str],
    build_number: Optional[str],
    no_update: bool,
    xms: Optional[str],
    xmx: Optional[str],
    java_cmd: Optional[str],
    no_tmux: bool,
) -> LaunchRequest:
    return LaunchRequest(
        mc_version=mc_version or None,
        build=build_number or None,
        auto_update=not no_update,
        xms=xms or None,
        xmx=xmx or None,
        java_cmd=java_cmd or None,
        use_tmux=not no_tmux,
    )


def get_controller(config: EffectiveConfig) -> LifecycleController:
    return LifecycleController(
        config,
        multiplexer=TmuxSessionManager(),
        handoff=ProcessHandoff(),
        confirm=confirm_removal,
    )


@click.command("start")
@launch_options
@click.pass_context
def start_server(ctx: click.Context, **options):
    """Deploys the requested version and starts the server."""
    config = ctx.obj["config"]
    request = build_request(**options)
    try:
        get_controller(config).start(request)
    except RunnerError as e:
        handle_runner_error("start server", e)


@click.command("stop")
@click.pass_context
def stop_server(ctx: click.Context):
    """Sends 'stop' to the server and closes its tmux session."""
    config = ctx.obj["config"]
    try:
        get_controller(config).stop()
    except RunnerError as e:
        handle_runner_error("stop server", e)


@click.command("restart")
@launch_options
@click.pass_context
def restart_server(ctx: click.Context, **options):
    """Stops the server if it is running, then starts it again."""
    config = ctx.obj["config"]
    request = build_request(**options)
    try:
        get_controller(config).restart(request)
    except RunnerError as e:
        handle_runner_error("restart server", e)


@click.command("toggle")
@launch_options
@click.pass_context
def toggle_server(ctx: click.Context, **options):
    """Stops the server if its session is live, otherwise starts it."""
    config = ctx.obj["config"]
    request = build_request(**options)
    try:
        get_controller(config).toggle(request)
    except RunnerError as e:
        handle_runner_error("toggle server", e)


@click.command("help")
@click.pass_context
def show_help(ctx: click.Context):
    """Shows this message and exits."""
    click.echo(ctx.parent.get_help())
