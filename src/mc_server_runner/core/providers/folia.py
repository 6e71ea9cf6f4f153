# mc_server_runner/core/providers/folia.py
"""
Folia jars built from a local git checkout inside a throwaway Docker image.

Flow: keep the checkout at ``FOLIA_SRC_DIR`` in sync with the remote branch,
mirror it into the Docker build context, build ``local-folia:latest`` (the
Gradle build runs in the image), create a stopped container from it, pick the
best jar out of the container and install it as ``folia-server.jar``.

Docker is driven through the docker SDK; git runs as a subprocess.
"""

import os
import shutil
import fnmatch
import logging
import tarfile
import posixpath
import tempfile
import subprocess
from typing import List, Optional

import docker
from docker.errors import DockerException, NotFound

from .base import ArtifactProvider, ResolvedRelease
from ..system.base import delete_path_robustly, mirror_directory
from ...error import BuildError, FileOperationError, PrerequisiteError

logger = logging.getLogger(__name__)

FOLIA_JAR_NAME = "folia-server.jar"
IMAGE_TAG = "local-folia:latest"
CONTAINER_NAME = "tempfolia"
CONTAINER_SOURCE_DIR = "/FoliaSource"
STAGING_DIR_NAME = "build-output"

DOCKERFILE_TEMPLATE = """\
FROM amazoncorretto:21

# Install missing tools using yum
RUN yum update -y && yum install -y git findutils

RUN git config --global user.name "Folia Builder"
RUN git config --global user.email "folia-builder@localhost"

WORKDIR {source_dir}
COPY . {source_dir}

# Build Folia
RUN ./gradlew applyAllPatches && ./gradlew createMojmapBundlerJar

CMD ["true"]
"""

# Ordered from most to least specific. ``on_path`` tiers match the full path
# inside the container, the others only the file name.
JAR_PRIORITY_TIERS = (
    {"patterns": ("*bundler*mojmap*.jar", "*mojmap*bundler*.jar"), "on_path": False},
    {"patterns": ("*mojmap*.jar",), "on_path": False},
    {"patterns": ("*/build/libs/*.jar",), "on_path": True},
    {"patterns": ("*.jar",), "on_path": False},
)


def pick_best_jar(jar_paths: List[str]) -> Optional[str]:
    """Returns the preferred server jar among ``jar_paths``.

    The first tier with any match wins; within a tier the reverse-sorted first
    path is taken, so higher version numbers come first.
    """
    for tier in JAR_PRIORITY_TIERS:
        matches = []
        for path in jar_paths:
            subject = path if tier["on_path"] else os.path.basename(path)
            if any(fnmatch.fnmatch(subject, pattern) for pattern in tier["patterns"]):
                matches.append(path)
        if matches:
            return sorted(matches, reverse=True)[0]
    return None


class FoliaDockerProvider(ArtifactProvider):
    required_commands = ("git",)

    def __init__(self, config, recorded_version=None, java_cmd=None, client=None):
        super().__init__(config, recorded_version, java_cmd)
        self._client = client

    @property
    def src_dir(self) -> str:
        return self.config.folia_src_dir

    @property
    def branch(self) -> str:
        return self.config.folia_branch

    @property
    def client(self) -> docker.DockerClient:
        if self._client is None:
            try:
                self._client = docker.from_env()
            except DockerException as e:
                raise PrerequisiteError(
                    f"Current user cannot run docker (missing permissions or daemon "
                    f"not running?): {e}"
                ) from e
        return self._client

    def check_prerequisites(self) -> None:
        """Makes sure the current user can talk to the Docker daemon."""
        try:
            self.client.ping()
        except DockerException as e:
            raise PrerequisiteError(
                f"Current user cannot run docker (missing permissions or daemon "
                f"not running?): {e}"
            ) from e

    def plan(self, explicit_version, explicit_build) -> ResolvedRelease:
        version = self._fallback_version(explicit_version) or ""
        if not version:
            logger.info(f"{self.tag} No version specified and no version record.")
        return ResolvedRelease(
            flavor=self.flavor,
            version=version,
            build=None,
            jar_name=FOLIA_JAR_NAME,
            path=self.server_path(FOLIA_JAR_NAME),
            source=self.config.folia_git_url,
        )

    # --- git ---

    def _git(self, args: List[str], capture: bool = False, cwd: Optional[str] = None) -> str:
        command = ["git", *args]
        logger.debug(f"Running {command}")
        try:
            result = subprocess.run(
                command,
                cwd=cwd or self.src_dir,
                capture_output=capture,
                text=True,
                check=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            returncode = getattr(e, "returncode", None)
            raise BuildError(
                f"git {args[0]} failed: {e}", returncode=returncode
            ) from e
        return (result.stdout or "").strip() if capture else ""

    def ensure_checkout(self) -> None:
        if os.path.isdir(os.path.join(self.src_dir, ".git")):
            return
        logger.info(f"{self.tag} Cloning repo into {self.src_dir} ...")
        parent = os.path.dirname(os.path.abspath(self.src_dir))
        os.makedirs(parent, exist_ok=True)
        self._git(
            ["clone", "--branch", self.branch, self.config.folia_git_url, self.src_dir],
            cwd=parent,
        )

    def fetch_heads(self):
        """Fetches the remote and returns ``(local_hash, remote_hash)``."""
        logger.info(f"{self.tag} Fetching remote...")
        self._git(["fetch", "origin"])
        local_hash = self._git(["rev-parse", "HEAD"], capture=True)
        remote_hash = self._git(["rev-parse", f"origin/{self.branch}"], capture=True)
        logger.info(f"{self.tag} Local HEAD:  {local_hash}")
        logger.info(f"{self.tag} Remote HEAD: {remote_hash}")
        return local_hash, remote_hash

    def pull(self) -> None:
        self._git(["pull", "--rebase", "origin", self.branch])

    # --- provisioning ---

    def provision(self, release, auto_update) -> ResolvedRelease:
        logger.info(f"=== {self.tag} Checking for Folia updates in local repo ===")
        self.ensure_checkout()
        local_hash, remote_hash = self.fetch_heads()
        jar_present = os.path.isfile(release.path)

        if not auto_update:
            logger.info(f"{self.tag} Auto-update OFF, not pulling changes...")
            if jar_present:
                logger.info(f"{self.tag} Using existing jar. No build.")
                return release
            logger.info(f"{self.tag} No {FOLIA_JAR_NAME} => forced Docker build...")
        elif local_hash != remote_hash:
            logger.info(f"{self.tag} Upstream changes detected. Pulling + building...")
            self.pull()
        else:
            logger.info(f"{self.tag} No remote changes (HEAD is up-to-date).")
            if jar_present:
                logger.info(f"{self.tag} jar is present => no build needed.")
                return release
            logger.info(f"{self.tag} jar missing => forced Docker build...")

        self.build(release.path)
        return release

    # --- docker ---

    def _copy_archive(self, container, path: str, fileobj) -> None:
        """Writes the tar archive of ``path`` inside ``container`` to ``fileobj``."""
        try:
            bits, _ = container.get_archive(path)
            for chunk in bits:
                fileobj.write(chunk)
        except DockerException as e:
            raise BuildError(f"docker cp from '{CONTAINER_NAME}:{path}' failed: {e}") from e
        fileobj.seek(0)

    def prepare_build_context(self) -> str:
        """Mirrors the checkout into the build context and writes the Dockerfile."""
        ctx = self.config.folia_docker_ctx
        mirror_directory(self.src_dir, ctx)
        dockerfile = os.path.join(ctx, "Dockerfile")
        try:
            with open(dockerfile, "w", encoding="utf-8") as f:
                f.write(DOCKERFILE_TEMPLATE.format(source_dir=CONTAINER_SOURCE_DIR))
        except OSError as e:
            raise FileOperationError(f"Failed to write '{dockerfile}': {e}") from e
        return ctx

    def build_image(self, ctx: str) -> None:
        """Builds ``IMAGE_TAG`` from ``ctx``, echoing the build log as it streams."""
        logger.info(f"{self.tag} docker build => {IMAGE_TAG}")
        try:
            for chunk in self.client.api.build(path=ctx, tag=IMAGE_TAG, rm=True, decode=True):
                if "error" in chunk:
                    raise BuildError(f"docker build failed: {chunk['error'].strip()}")
                line = chunk.get("stream", "").rstrip()
                if line:
                    logger.info(line)
        except DockerException as e:
            raise BuildError(f"docker build failed: {e}") from e

    def remove_stale_container(self) -> None:
        # A container left over from an interrupted run would block the name.
        try:
            self.client.containers.get(CONTAINER_NAME).remove(force=True)
            logger.debug(f"{self.tag} Removed stale container '{CONTAINER_NAME}'.")
        except NotFound:
            pass
        except DockerException as e:
            raise BuildError(f"Could not remove stale container '{CONTAINER_NAME}': {e}") from e

    def create_container(self):
        try:
            return self.client.containers.create(IMAGE_TAG, name=CONTAINER_NAME)
        except DockerException as e:
            raise BuildError(f"docker create failed: {e}") from e

    def remove_container(self, container) -> None:
        try:
            container.remove(force=True)
        except DockerException as e:
            logger.warning(f"{self.tag} Could not remove container '{CONTAINER_NAME}': {e}")

    def list_container_jars(self, container) -> List[str]:
        """Lists ``*.jar`` files under the source dir of the build container.

        The archive is spooled to a temporary file and only its headers are
        read; nothing is extracted.
        """
        parent = posixpath.dirname(CONTAINER_SOURCE_DIR)
        with tempfile.TemporaryFile() as spool:
            self._copy_archive(container, CONTAINER_SOURCE_DIR, spool)
            try:
                with tarfile.open(fileobj=spool) as archive:
                    return [
                        posixpath.join(parent, member.name)
                        for member in archive.getmembers()
                        if member.isfile() and member.name.endswith(".jar")
                    ]
            except tarfile.TarError as e:
                raise BuildError(
                    f"Could not list jars in container '{CONTAINER_NAME}': {e}"
                ) from e

    def copy_jar_out(self, container, jar_path: str, staging_dir: str) -> str:
        """Copies one jar out of the container into ``staging_dir``."""
        staged = os.path.join(staging_dir, posixpath.basename(jar_path))
        with tempfile.TemporaryFile() as spool:
            self._copy_archive(container, jar_path, spool)
            try:
                with tarfile.open(fileobj=spool) as archive:
                    member = next((m for m in archive.getmembers() if m.isfile()), None)
                    if member is None:
                        raise BuildError(f"'{jar_path}' is not a file in the container.")
                    with archive.extractfile(member) as source, open(staged, "wb") as target:
                        shutil.copyfileobj(source, target)
            except tarfile.TarError as e:
                raise BuildError(f"Could not read '{jar_path}' from the container: {e}") from e
        return staged

    def build(self, target_path: str) -> str:
        """Builds Folia in Docker and installs the jar at ``target_path``.

        The container and the staging directory are removed on every path.

        Raises:
            BuildError: If any docker step fails or no jar is produced.
        """
        logger.info(f"=== {self.tag} Building Folia in Docker ===")
        ctx = self.prepare_build_context()
        self.build_image(ctx)

        staging_dir = self.server_path(STAGING_DIR_NAME)
        self.remove_stale_container()
        container = self.create_container()
        try:
            logger.info(f"{self.tag} Searching for bundler jar in container...")
            jar_paths = self.list_container_jars(container)
            for jar_path in jar_paths:
                logger.debug(f"{self.tag} Found jar: {jar_path}")

            best = pick_best_jar(jar_paths)
            if best is None:
                raise BuildError("Could not find any jar files in the container!")

            os.makedirs(staging_dir, exist_ok=True)
            staged = self.copy_jar_out(container, best, staging_dir)
            logger.info(f"{self.tag} Using jar: {posixpath.basename(best)}")
            try:
                shutil.move(staged, target_path)
            except OSError as e:
                raise FileOperationError(
                    f"Failed to move '{staged}' to '{target_path}': {e}"
                ) from e
        finally:
            delete_path_robustly(staging_dir, "build staging directory")
            self.remove_container(container)

        logger.info(f"=== Done. Built Folia ({FOLIA_JAR_NAME}) is in {self.config.server_dir} ===")
        return target_path
