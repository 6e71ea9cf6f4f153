# mc_server_runner/__init__.py
import logging

from mc_server_runner.config.const import get_installed_version

logger = logging.getLogger(__name__)

__version__ = get_installed_version()
