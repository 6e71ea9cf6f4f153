# mc_server_runner/core/providers/papermc.py
"""Paper and Velocity jars from the PaperMC v2 downloads API."""

import os
import logging
from typing import Any, Dict, List, Optional

from .base import ArtifactProvider, ResolvedRelease
from ..downloader import download_file, fetch_json
from ...config.const import PAPERMC_API_BASE
from ...error import FileOperationError, UpstreamDataError

logger = logging.getLogger(__name__)

STABLE_CHANNEL = "default"


def select_build(
    builds: List[Dict[str, Any]], explicit_build: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """Picks a build entry from a PaperMC ``builds`` list.

    An explicit build number is matched exactly, whatever its channel.
    Otherwise the highest-numbered build on the stable channel wins. Returns
    None when nothing qualifies.
    """
    if explicit_build:
        for build in builds:
            if str(build.get("build")) == str(explicit_build).strip():
                return build
        return None

    stable = [b for b in builds if b.get("channel") == STABLE_CHANNEL]
    if not stable:
        return None
    return max(stable, key=lambda b: int(b.get("build", 0)))


class PaperMCProvider(ArtifactProvider):
    """Downloads ready-made jars for the ``paper`` and ``velocity`` projects."""

    def __init__(self, config, recorded_version=None, api_base: str = PAPERMC_API_BASE):
        super().__init__(config, recorded_version)
        self.api_base = api_base.rstrip("/")

    @property
    def project_url(self) -> str:
        return f"{self.api_base}/projects/{self.flavor.value}"

    def version_url(self, version: str) -> str:
        return f"{self.project_url}/versions/{version}"

    def latest_version(self) -> str:
        """Returns the newest version the project publishes."""
        logger.info(
            f"{self.tag} No version specified and no version record => "
            "fetching latest from PaperMC..."
        )
        data = fetch_json(self.project_url)
        versions = data.get("versions") if isinstance(data, dict) else None
        if not versions:
            raise UpstreamDataError(
                f"PaperMC returned no versions for project '{self.flavor.value}'."
            )
        return str(versions[-1])

    def plan(self, explicit_version, explicit_build) -> ResolvedRelease:
        version = self._fallback_version(explicit_version) or self.latest_version()

        builds_url = f"{self.version_url(version)}/builds"
        if explicit_build:
            logger.info(f"{self.tag} Looking up build {explicit_build} for {version}...")
        else:
            logger.info(f"{self.tag} No build number => fetching latest stable build for {version}...")
        data = fetch_json(builds_url)
        builds = data.get("builds", []) if isinstance(data, dict) else []

        unresolved = ResolvedRelease(
            flavor=self.flavor,
            version=version,
            build=explicit_build,
            jar_name="",
            path=None,
            source=builds_url,
        )

        build = select_build(builds, explicit_build)
        if build is None:
            if explicit_build:
                logger.error(f"{self.tag} Build {explicit_build} does not exist for {version}.")
            else:
                logger.error(f"{self.tag} No stable build available for {version}.")
            return unresolved

        build_number = str(build.get("build"))
        jar_name = (
            build.get("downloads", {}).get("application", {}).get("name") or ""
        )
        if not jar_name:
            logger.error(
                f"{self.tag} Build {build_number} for {version} lists no application jar."
            )
            return ResolvedRelease(
                flavor=self.flavor,
                version=version,
                build=build_number,
                jar_name="",
                path=None,
                source=builds_url,
            )

        return ResolvedRelease(
            flavor=self.flavor,
            version=version,
            build=build_number,
            jar_name=jar_name,
            path=self.server_path(jar_name),
            source=f"{self.version_url(version)}/builds/{build_number}/downloads/{jar_name}",
        )

    def remove_old_jars(self, keep: str) -> List[str]:
        """Deletes every ``*.jar`` directly in the server dir except ``keep``."""
        removed = []
        server_dir = self.config.server_dir
        if not os.path.isdir(server_dir):
            return removed

        logger.info(f"{self.tag} Removing old .jar files except {keep}...")
        for entry in sorted(os.listdir(server_dir)):
            entry_path = os.path.join(server_dir, entry)
            if entry == keep or not entry.endswith(".jar"):
                continue
            if not os.path.isfile(entry_path):
                continue
            try:
                os.remove(entry_path)
            except OSError as e:
                raise FileOperationError(f"Failed to remove old jar '{entry_path}': {e}") from e
            logger.info(f"{self.tag} Removed '{entry_path}'")
            removed.append(entry_path)
        return removed

    def provision(self, release, auto_update) -> ResolvedRelease:
        if not release.is_launchable:
            logger.error(f"{self.tag} Nothing to download for {release.version}.")
            return release

        self.remove_old_jars(keep=release.jar_name)

        if os.path.isfile(release.path):
            if not auto_update:
                logger.info(f"{self.tag} Auto-update OFF => skip download.")
                return release
            logger.info(f"{self.tag} Auto-update ON => re-downloading {release.jar_name}...")
        else:
            logger.info(f"{self.tag} Downloading {release.jar_name}...")

        download_file(release.source, release.path)
        return release
