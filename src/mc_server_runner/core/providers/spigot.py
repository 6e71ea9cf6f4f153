# mc_server_runner/core/providers/spigot.py
"""Spigot jars compiled locally with BuildTools."""

import os
import glob
import shutil
import logging
import subprocess

from .base import ArtifactProvider, ResolvedRelease
from ..downloader import download_file
from ..system.base import delete_path_robustly, is_command_available
from ...config.const import BUILD_TOOLS_JAR_URL, SPIGOT_BASELINE_VERSION
from ...error import BuildError, FileOperationError

logger = logging.getLogger(__name__)

SPIGOT_JAR_NAME = "spigot-server.jar"
BUILD_TOOLS_JAR_NAME = "BuildTools.jar"

# Left behind by previous BuildTools runs; removed so each build starts clean.
STALE_BUILD_ENTRIES = ("Spigot", "CraftBukkit", "Bukkit", "work", "apache-maven-*")


class SpigotBuildToolsProvider(ArtifactProvider):
    required_commands = ("git",)

    @property
    def build_tools_jar(self) -> str:
        return os.path.join(self.config.spigot_build_dir, BUILD_TOOLS_JAR_NAME)

    def check_prerequisites(self) -> None:
        if not is_command_available("mvn"):
            logger.warning(
                f"{self.tag} 'mvn' not found. BuildTools may download Maven itself."
            )

    def plan(self, explicit_version, explicit_build) -> ResolvedRelease:
        version = self._fallback_version(explicit_version)
        if not version:
            logger.info(
                f"{self.tag} No version specified and no version record => "
                f"using {SPIGOT_BASELINE_VERSION}"
            )
            version = SPIGOT_BASELINE_VERSION
        return ResolvedRelease(
            flavor=self.flavor,
            version=version,
            build=None,
            jar_name=SPIGOT_JAR_NAME,
            path=self.server_path(SPIGOT_JAR_NAME),
            source=BUILD_TOOLS_JAR_URL,
        )

    def ensure_build_tools(self, auto_update: bool) -> str:
        """Downloads BuildTools.jar if missing, or always when auto-updating."""
        os.makedirs(self.config.spigot_build_dir, exist_ok=True)
        if not os.path.isfile(self.build_tools_jar):
            logger.info(f"{self.tag} Downloading BuildTools.jar to {self.build_tools_jar}")
        elif auto_update:
            logger.info(f"{self.tag} Auto-update => re-download BuildTools.jar")
        else:
            logger.info(
                f"{self.tag} BuildTools.jar already exists; no re-download (auto-update=OFF)."
            )
            return self.build_tools_jar
        return download_file(BUILD_TOOLS_JAR_URL, self.build_tools_jar)

    def clean_build_dir(self) -> None:
        for pattern in STALE_BUILD_ENTRIES:
            for entry in glob.glob(os.path.join(self.config.spigot_build_dir, pattern)):
                delete_path_robustly(entry, "stale BuildTools output")

    def run_build_tools(self, version: str) -> str:
        """Runs BuildTools for ``version`` and returns the built jar's path.

        Raises:
            BuildError: If BuildTools exits non-zero or produces no jar.
        """
        build_dir = self.config.spigot_build_dir
        command = [self.java_cmd, "-jar", self.build_tools_jar, "--rev", version]
        logger.info(f"=== Building Spigot (version {version}) via BuildTools ===")
        logger.debug(f"Running {command} in {build_dir}")
        try:
            process = subprocess.run(command, cwd=build_dir, check=False)
        except OSError as e:
            raise BuildError(f"Could not run BuildTools: {e}") from e
        if process.returncode != 0:
            raise BuildError(
                f"BuildTools failed with exit code {process.returncode}.",
                returncode=process.returncode,
            )

        built_jar = os.path.join(build_dir, f"spigot-{version}.jar")
        if not os.path.isfile(built_jar):
            raise BuildError(f"No spigot-{version}.jar found in {build_dir}.")
        return built_jar

    def provision(self, release, auto_update) -> ResolvedRelease:
        self.ensure_build_tools(auto_update)

        if os.path.isfile(release.path) and not auto_update:
            logger.info(
                f"{self.tag} {SPIGOT_JAR_NAME} present, auto-update=OFF => using existing jar."
            )
            return release

        self.clean_build_dir()
        built_jar = self.run_build_tools(release.version)
        try:
            shutil.copy2(built_jar, release.path)
        except OSError as e:
            raise FileOperationError(
                f"Failed to copy '{built_jar}' to '{release.path}': {e}"
            ) from e
        logger.info(f"=== Done. Built Spigot => {release.path} ===")
        return release
