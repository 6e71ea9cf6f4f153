# mc_server_runner/config/__init__.py
from .const import (
    package_name,
    executable_name,
    app_name_title,
    app_author,
    get_installed_version,
)
from .settings import EffectiveConfig, resolve_config

__all__ = [
    "package_name",
    "executable_name",
    "app_name_title",
    "app_author",
    "get_installed_version",
    "EffectiveConfig",
    "resolve_config",
]
