# mc_server_runner/core/providers/__init__.py
from typing import Optional

from .base import ArtifactProvider, ResolvedRelease
from .folia import FoliaDockerProvider
from .papermc import PaperMCProvider
from .spigot import SpigotBuildToolsProvider
from ..flavor import Flavor
from ...config.settings import EffectiveConfig

PROVIDERS = {
    Flavor.PAPER: PaperMCProvider,
    Flavor.VELOCITY: PaperMCProvider,
    Flavor.FOLIA: FoliaDockerProvider,
    Flavor.SPIGOT: SpigotBuildToolsProvider,
}


def get_provider(
    config: EffectiveConfig,
    recorded_version: Optional[str] = None,
    java_cmd: Optional[str] = None,
) -> ArtifactProvider:
    """Returns the one provider responsible for ``config.flavor``."""
    return PROVIDERS[config.flavor](config, recorded_version, java_cmd=java_cmd)


__all__ = [
    "ArtifactProvider",
    "ResolvedRelease",
    "FoliaDockerProvider",
    "PaperMCProvider",
    "SpigotBuildToolsProvider",
    "get_provider",
]
