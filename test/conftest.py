import pytest
import os
import sys
import logging
from unittest.mock import MagicMock

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../src")))

from mc_server_runner.config.settings import ALLOWED_KEYS, EffectiveConfig
from mc_server_runner.core.flavor import Flavor
from mc_server_runner.core.system.process import ProcessHandoff
from mc_server_runner.core.system.tmux import TmuxSessionManager


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path, tmp_path_factory):
    """
    Keeps every test away from the real environment: runner variables are
    cleared and the per-user config and log directories point into tmp_path.
    """
    for key in ALLOWED_KEYS:
        monkeypatch.delenv(key, raising=False)

    test_config_dir = tmp_path_factory.mktemp("test_config")
    test_log_dir = tmp_path / "test_logs"

    monkeypatch.setattr(
        "mc_server_runner.config.settings.user_config_dir",
        lambda *args, **kwargs: str(test_config_dir),
    )
    monkeypatch.setattr(
        "mc_server_runner.config.settings.user_log_dir",
        lambda *args, **kwargs: str(test_log_dir),
    )
    yield

    # Handlers opened by setup_logging() would otherwise leak between tests.
    package_logger = logging.getLogger("mc_server_runner")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


@pytest.fixture
def server_dir(tmp_path):
    """An existing, empty server directory."""
    path = tmp_path / "server"
    path.mkdir()
    return path


@pytest.fixture
def make_config(tmp_path, server_dir):
    """Factory for an EffectiveConfig rooted in tmp_path."""

    def _make_config(**overrides):
        values = dict(
            server_dir=str(server_dir),
            flavor=Flavor.PAPER,
            world_name="world",
            xms="2G",
            xmx="2G",
            java_cmd="java",
            folia_src_dir=str(tmp_path / "FoliaSource"),
            folia_git_url="https://github.com/PaperMC/Folia.git",
            folia_branch="dev/hard-fork",
            folia_docker_ctx=str(tmp_path / "folia_docker_build"),
            spigot_build_dir=str(server_dir / "buildtools"),
            session_name="server",
            eula_auto_accept=True,
            log_dir=str(tmp_path / "test_logs"),
            log_level=logging.INFO,
            stop_grace_seconds=0.0,
        )
        values.update(overrides)
        return EffectiveConfig(**values)

    return _make_config


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def mock_multiplexer():
    """A tmux stand-in with tmux installed and no live session."""
    multiplexer = MagicMock(spec=TmuxSessionManager)
    multiplexer.is_available.return_value = True
    multiplexer.has_session.return_value = False
    return multiplexer


@pytest.fixture
def mock_handoff():
    """Records exec requests instead of replacing the test process."""
    return MagicMock(spec=ProcessHandoff)
