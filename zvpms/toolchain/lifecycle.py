"""
Registry lifecycle operations: remove, rename, select and update.

Each operation mutates ``context.registry`` together with the matching
version directory and saves the registry before returning. Directory
changes come first where they can fail in a way that must abort the
operation (rename); removal treats a stuck directory as a warning only.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

from zvpms.context import Context
from zvpms.core.exceptions import (
    NoVersionsFoundError,
    VersionAlreadyExistsError,
    VersionNotInstalledError,
)
from zvpms.core.filesystem import remove_tree, rename_directory
from zvpms.core.version import VersionId, parse_version
from zvpms.toolchain.installer import InstallResult, VersionInstaller

logger = logging.getLogger(__name__)


def remove_version(context: Context, version: VersionId) -> bool:
    """
    Unregister version and delete its directory.

    Removing a version that is not installed is not an error. If the
    directory cannot be deleted a warning is logged and the registry change
    is still saved.

    Returns:
        True if the directory was removed (or was already absent)
    """
    context.registry.discard(version)

    version_dir = context.paths.version_dir(version)
    removed = True
    try:
        remove_tree(version_dir)
    except OSError as e:
        logger.warning(f"Warning: Could not remove directory {version_dir}: {e}")
        removed = False

    context.save()
    logger.info(f"Removed version: {version}")
    return removed


def rename_version(context: Context, old: VersionId, new: VersionId) -> None:
    """
    Rename an installed version, moving its directory.

    Raises:
        VersionNotInstalledError: If old is not installed
        VersionAlreadyExistsError: If new is already installed
        OSError: If the directory cannot be renamed (registry untouched)
    """
    registry = context.registry
    if not registry.is_installed(old):
        raise VersionNotInstalledError(old)
    if registry.is_installed(new):
        raise VersionAlreadyExistsError(new)

    rename_directory(context.paths.version_dir(old), context.paths.version_dir(new))

    registry.replace(old, new)
    context.save()
    logger.info(f"Renamed version {old} to {new}")


def set_current_version(context: Context, version: VersionId) -> None:
    """
    Select version as the current toolchain.

    The version directory is not inspected here; a missing executable is
    reported when the proxy runs.

    Raises:
        VersionNotInstalledError: If version is not installed
    """
    if not context.registry.is_installed(version):
        raise VersionNotInstalledError(version)

    context.registry.current = version
    context.save()
    logger.info(f"Current version set to: {version}")


class UpdateStatus(enum.Enum):
    """How an update request ended."""

    ALREADY_LATEST = "already-latest"
    INSTALLED = "installed"


@dataclass
class UpdateResult:
    """Outcome of update_version()."""

    requested: VersionId
    latest: VersionId
    status: UpdateStatus
    install: Optional[InstallResult] = None


def update_version(
    context: Context, request: str, installer: Optional[VersionInstaller] = None
) -> UpdateResult:
    """
    Install the newest patch release in request's ``major.minor`` series.

    The requested version stays installed; this adds the newer patch
    alongside it rather than replacing it.

    Args:
        context: Invocation context
        request: ``major.minor.patch`` string
        installer: Installer to use (default: VersionInstaller(context))

    Raises:
        InvalidVersionError: If request is not a valid version
        NoVersionsFoundError: If the index has no release in the series
        (plus anything VersionInstaller.install_version raises)
    """
    requested = parse_version(request)
    latest = context.index.latest_in_series(requested.major, requested.minor)

    if latest is None:
        raise NoVersionsFoundError(
            f"No versions found for {requested.major}.{requested.minor}.x"
        )

    if latest == requested:
        logger.info(f"Version {requested} is already the latest in its series")
        return UpdateResult(requested, latest, UpdateStatus.ALREADY_LATEST)

    logger.info(f"Updating {requested} to {latest}")
    installer = installer or VersionInstaller(context)
    result = installer.install_version(latest)
    return UpdateResult(requested, latest, UpdateStatus.INSTALLED, install=result)
