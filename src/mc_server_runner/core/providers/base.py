# mc_server_runner/core/providers/base.py
"""Abstract artifact provider.

A provider answers two questions for one flavor: which release should run
(:meth:`ArtifactProvider.plan`, no side effects on the server directory) and
how to get its jar onto disk (:meth:`ArtifactProvider.provision`). The split
lets the deploy step back up world data between the two, once the target
version is known but before any jar is replaced.
"""

import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple

from ..flavor import Flavor
from ...config.settings import EffectiveConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedRelease:
    """What a provider decided to deploy.

    ``path`` is None when the release could not be resolved to an artifact;
    the server cannot be launched in that case.
    """

    flavor: Flavor
    version: str
    build: Optional[str]
    jar_name: str
    path: Optional[str]
    source: str

    @property
    def is_launchable(self) -> bool:
        return self.path is not None


class ArtifactProvider(ABC):
    """Produces a server jar for a single flavor."""

    #: External commands that must be on PATH before :meth:`provision` runs.
    required_commands: Tuple[str, ...] = ()

    def __init__(
        self,
        config: EffectiveConfig,
        recorded_version: Optional[str] = None,
        java_cmd: Optional[str] = None,
    ):
        self.config = config
        self.recorded_version = recorded_version
        #: Java used by build steps; the command-line override wins over config.
        self.java_cmd = java_cmd or config.java_cmd

    @property
    def flavor(self) -> Flavor:
        return self.config.flavor

    @property
    def tag(self) -> str:
        return self.flavor.tag

    def server_path(self, name: str) -> str:
        return os.path.join(self.config.server_dir, name)

    def check_prerequisites(self) -> None:
        """Hook for checks beyond :attr:`required_commands`."""
        return None

    def _fallback_version(self, explicit_version: Optional[str]) -> Optional[str]:
        if explicit_version:
            return explicit_version
        if self.recorded_version:
            logger.info(
                f"{self.tag} No version specified => using {self.recorded_version} "
                "from the version record."
            )
            return self.recorded_version
        return None

    @abstractmethod
    def plan(
        self, explicit_version: Optional[str], explicit_build: Optional[str]
    ) -> ResolvedRelease:
        """Resolves version, build and artifact location without touching disk."""
        raise NotImplementedError

    @abstractmethod
    def provision(self, release: ResolvedRelease, auto_update: bool) -> ResolvedRelease:
        """Makes sure the artifact for ``release`` exists at ``release.path``."""
        raise NotImplementedError

    def resolve(
        self,
        explicit_version: Optional[str],
        explicit_build: Optional[str],
        auto_update: bool,
    ) -> ResolvedRelease:
        """Plans and provisions in one step, without a version transition in between.

        Used when the world backup is not wanted, e.g. to refresh a jar.
        """
        release = self.plan(explicit_version, explicit_build)
        return self.provision(release, auto_update)
