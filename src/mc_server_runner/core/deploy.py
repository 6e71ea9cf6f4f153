# mc_server_runner/core/deploy.py
"""Puts the requested server release in place.

Order matters: the provider first decides which release to deploy, then the
transition guard backs up world data if the version changed, then the
provider fetches or builds the jar, and only after that succeeds is the
version record updated.
"""

import logging
from typing import Optional

from .providers.base import ArtifactProvider, ResolvedRelease
from .server_files import write_version_record
from .transition import ConfirmCallback, maybe_transition
from ..config.settings import EffectiveConfig

logger = logging.getLogger(__name__)


def deploy(
    config: EffectiveConfig,
    provider: ArtifactProvider,
    explicit_version: Optional[str],
    explicit_build: Optional[str],
    auto_update: bool,
    confirm: ConfirmCallback,
    launcher_name: Optional[str] = None,
) -> ResolvedRelease:
    """Plans, transitions, provisions and records one deployment.

    Returns:
        The provisioned release. Its ``path`` is None when the provider could
        not resolve an artifact; nothing is backed up or recorded then.
    """
    old_version = provider.recorded_version
    release = provider.plan(explicit_version, explicit_build)

    if not release.is_launchable:
        logger.error(
            f"{provider.tag} Could not resolve an artifact for version "
            f"'{release.version}'. Skipping backup and download."
        )
        return release

    maybe_transition(
        config, config.flavor, old_version, release.version, confirm, launcher_name
    )

    release = provider.provision(release, auto_update)

    if release.is_launchable and release.version:
        write_version_record(config.version_file, release.version)
    return release
