# mc_server_runner/core/lifecycle.py
"""
Start, stop, restart and toggle for a server running in a tmux session.

The session name is the only liveness signal: a live session means "running",
an absent one means "stopped". ``start`` refuses to run over a live session
before it touches anything in the server directory.
"""

import os
import time
import logging
import subprocess
from dataclasses import dataclass, replace
from typing import Callable, List, Optional

from .deploy import deploy
from .flavor import Flavor
from .launch import build_launch_command, extra_args, server_flags
from .providers import ArtifactProvider, ResolvedRelease, get_provider
from .server_files import ensure_eula, read_version_record
from .system.base import connection_info_lines, require_commands
from .system.java import detect_java_major_version
from .system.process import ProcessHandoff, build_self_command
from .system.tmux import TmuxSessionManager
from .transition import ConfirmCallback
from ..config.const import SERVER_LOGS_DIR_NAME
from ..config.settings import EffectiveConfig
from ..error import (
    AppFileNotFoundError,
    FileOperationError,
    PrerequisiteError,
    ServerAlreadyRunningError,
    ServerStopError,
)

logger = logging.getLogger(__name__)

FOLIA_MIN_JAVA_VERSION = 17


@dataclass(frozen=True)
class LaunchRequest:
    """Options given to ``start``/``restart``/``toggle`` on the command line.

    ``xms``, ``xmx`` and ``java_cmd`` left as None fall back to the
    configuration; see :meth:`with_defaults`.
    """

    mc_version: Optional[str] = None
    build: Optional[str] = None
    auto_update: bool = True
    xms: Optional[str] = None
    xmx: Optional[str] = None
    java_cmd: Optional[str] = None
    use_tmux: bool = True

    def with_defaults(self, config: EffectiveConfig) -> "LaunchRequest":
        return replace(
            self,
            xms=self.xms or config.xms,
            xmx=self.xmx or config.xmx,
            java_cmd=self.java_cmd or config.java_cmd,
        )

    def to_cli_args(self) -> List[str]:
        """Rebuilds the ``start`` arguments that produce this request."""
        args: List[str] = []
        if self.mc_version:
            args.append(self.mc_version)
            if self.build:
                args.append(self.build)
        if not self.auto_update:
            args.append("--no-update")
        if self.xms:
            args.append(f"--xms={self.xms}")
        if self.xmx:
            args.append(f"--xmx={self.xmx}")
        if self.java_cmd:
            args.append(f"--java-cmd={self.java_cmd}")
        if not self.use_tmux:
            args.append("--no-tmux")
        return args


def _keep_everything(path: str) -> bool:
    return False


class LifecycleController:
    """Drives the server process through a tmux session.

    Args:
        config: The effective configuration.
        multiplexer: Session manager; defaults to :class:`TmuxSessionManager`.
        handoff: Performs the final ``exec``; defaults to :class:`ProcessHandoff`.
        confirm: Asked before each server-dir entry is removed during a version
            transition. Declines everything by default.
        sleep: Used for the grace period between ``stop`` and killing the session.
        provider_factory: Builds the artifact provider for the configured flavor.
        java_detector: Returns the major version of a Java command, or None.
    """

    def __init__(
        self,
        config: EffectiveConfig,
        multiplexer: Optional[TmuxSessionManager] = None,
        handoff: Optional[ProcessHandoff] = None,
        confirm: Optional[ConfirmCallback] = None,
        sleep: Callable[[float], None] = time.sleep,
        provider_factory: Callable[..., ArtifactProvider] = get_provider,
        java_detector: Callable[[str], Optional[int]] = detect_java_major_version,
        proc_version_path: str = "/proc/version",
    ):
        self.config = config
        self.multiplexer = multiplexer or TmuxSessionManager()
        self.handoff = handoff or ProcessHandoff()
        self.confirm = confirm or _keep_everything
        self.sleep = sleep
        self.provider_factory = provider_factory
        self.java_detector = java_detector
        self.proc_version_path = proc_version_path

    @property
    def session_name(self) -> str:
        return self.config.session_name

    def tmux_enabled(self, request: LaunchRequest) -> bool:
        if not request.use_tmux:
            return False
        if not self.multiplexer.is_available():
            logger.warning("tmux not installed. Disabling tmux usage.")
            return False
        return True

    def is_running(self) -> bool:
        return self.multiplexer.has_session(self.session_name)

    # --- toggle ---

    def toggle(self, request: LaunchRequest) -> Optional[ResolvedRelease]:
        """Stops a live session, otherwise starts the server."""
        if not self.tmux_enabled(request):
            logger.info("[toggle] tmux disabled. Will 'start'.")
            return self.start(replace(request, use_tmux=False))

        if self.is_running():
            logger.info(f"[toggle] Session '{self.session_name}' found. Stopping...")
            self.stop()
            return None

        logger.info(f"[toggle] Session '{self.session_name}' not found. Starting...")
        return self.start(request)

    # --- stop ---

    def stop(self) -> bool:
        """Asks the server to stop, waits the grace period and kills the session.

        Returns:
            True if a session was stopped, False if none was running.

        Raises:
            ServerStopError: If the session could not be killed.
        """
        name = self.session_name
        logger.info(f"Stopping server (session: {name})...")
        if not self.multiplexer.has_session(name):
            logger.info(f"No tmux session named '{name}'. Probably not running.")
            return False

        try:
            self.multiplexer.send_keys(name, "stop")
            self.sleep(self.config.stop_grace_seconds)
        except (subprocess.CalledProcessError, OSError) as e:
            logger.warning(f"Could not send 'stop' to session '{name}': {e}")
        finally:
            try:
                self.multiplexer.kill_session(name)
            except (subprocess.CalledProcessError, OSError) as e:
                raise ServerStopError(
                    f"Failed to kill tmux session '{name}': {e}"
                ) from e

        logger.info("Server stopped.")
        return True

    # --- restart ---

    def restart(self, request: LaunchRequest) -> None:
        """Stops the server (if running) and re-executes this program with ``start``."""
        request = request.with_defaults(self.config)
        self.stop()
        logger.info("Restarting server...")
        self.handoff.replace(build_self_command(["start", *request.to_cli_args()]))

    # --- start ---

    def check_prerequisites(self, provider: ArtifactProvider, java_cmd: str) -> None:
        flavor = self.config.flavor
        require_commands(provider.required_commands, reason=f"to deploy {flavor.title}")
        require_commands([java_cmd], reason="to run the server")
        provider.check_prerequisites()

    def check_java(self, java_cmd: str) -> Optional[int]:
        java_major = self.java_detector(java_cmd)
        if (
            self.config.flavor is Flavor.FOLIA
            and java_major is not None
            and java_major < FOLIA_MIN_JAVA_VERSION
        ):
            raise PrerequisiteError(
                f"Folia requires Java {FOLIA_MIN_JAVA_VERSION}+. Found {java_major}."
            )
        return java_major

    def ensure_server_dir(self) -> None:
        server_dir = self.config.server_dir
        if os.path.isdir(server_dir):
            return
        logger.warning(f"SERVER_DIR '{server_dir}' does not exist. Creating...")
        try:
            os.makedirs(server_dir, exist_ok=True)
        except OSError as e:
            raise FileOperationError(f"Failed to create '{server_dir}': {e}") from e

    def summary_lines(
        self,
        release: ResolvedRelease,
        request: LaunchRequest,
        java_major: Optional[int],
        use_tmux: bool,
    ) -> List[str]:
        rows = [
            ("PROJECT_NAME", self.config.flavor),
            ("SERVER_DIR", self.config.server_dir),
            ("MINECRAFT_VERSION", release.version),
            ("BUILD_NUMBER", release.build or ""),
            ("JAR_NAME", release.jar_name),
            ("FILE", release.path or ""),
            ("AUTO_UPDATE", str(request.auto_update).lower()),
            ("CURRENT_VERSION_FILE", self.config.version_file),
            ("XMS", request.xms),
            ("XMX", request.xmx),
            ("JAVA_CMD", request.java_cmd),
            ("JAVA_MAJOR_VERSION", "" if java_major is None else java_major),
            ("USE_TMUX", str(use_tmux).lower()),
            ("TMUX_SESSION_NAME", self.session_name),
        ]
        separator = "-" * 40
        return [separator, *(f"{key:<20} = {value}" for key, value in rows), separator]

    def print_connection_info(self) -> None:
        for line in connection_info_lines(self.proc_version_path):
            logger.info(line)

    def start(self, request: LaunchRequest) -> ResolvedRelease:
        """Deploys the requested release and launches it.

        With tmux the server runs in a new detached session and this returns
        the deployed release. Without tmux the current process is replaced by
        the JVM and this never returns.

        Raises:
            ServerAlreadyRunningError: If the session is already live.
            CommandNotFoundError: If a required tool is missing.
            PrerequisiteError: If a tool is unusable or Java is too old.
            AppFileNotFoundError: If no server jar is available to launch.
        """
        request = request.with_defaults(self.config)
        config = self.config
        use_tmux = self.tmux_enabled(request)

        if use_tmux and self.multiplexer.has_session(self.session_name):
            raise ServerAlreadyRunningError(self.session_name)

        provider = self.provider_factory(
            config, read_version_record(config.version_file), java_cmd=request.java_cmd
        )
        self.check_prerequisites(provider, request.java_cmd)
        java_major = self.check_java(request.java_cmd)
        self.ensure_server_dir()

        release = deploy(
            config,
            provider,
            request.mc_version,
            request.build,
            request.auto_update,
            self.confirm,
        )

        os.makedirs(os.path.join(config.server_dir, SERVER_LOGS_DIR_NAME), exist_ok=True)
        ensure_eula(config.eula_file, config.eula_auto_accept)

        for line in self.summary_lines(release, request, java_major, use_tmux):
            logger.info(line)

        if not release.is_launchable or not os.path.isfile(release.path):
            raise AppFileNotFoundError(
                release.path or f"<unresolved {config.flavor} {release.version} jar>",
                "Server jar",
            )

        command = build_launch_command(
            request.java_cmd,
            config.flavor,
            release.path,
            request.xms,
            request.xmx,
            java_major,
        )
        logger.info(f"Starting {config.flavor} server...")
        logger.info(
            f"Server Flags  : {' '.join(server_flags(config.flavor, request.xms, request.xmx, java_major))}"
        )
        logger.info(f"Extra Args    : {' '.join(extra_args(config.flavor))}")

        if use_tmux:
            self.multiplexer.new_session(self.session_name, command, cwd=config.server_dir)
            logger.info(f"Server started in tmux session '{self.session_name}'.")
            self.print_connection_info()
            return release

        self.print_connection_info()
        self.handoff.replace(command, cwd=config.server_dir)
