"""
Toolchain installation.

Installing a version runs these steps in order:
1. Resolve the request (``master`` or a literal version)
2. Look up the download for this platform in the remote index
3. Create the version directory (an existing directory ends the install
   successfully without touching anything)
4. Download the archive into the new directory
5. Extract it in place, stripping the archive's top-level directory
6. Delete the archive
7. Register the version and save the registry

A failed download removes the new directory again. A failed extraction
leaves the directory as it is; ``zvpms remove <version>`` clears it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from zvpms.context import Context
from zvpms.core.download import DownloadProgress, download_file
from zvpms.core.exceptions import DownloadError
from zvpms.core.filesystem import extract_archive, remove_tree
from zvpms.core.index import ReleaseArtifact
from zvpms.core.version import VersionId

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Result of an install request."""

    version: VersionId
    """Concrete version the request resolved to"""

    path: Path
    """Version directory"""

    already_present: bool
    """True if the directory existed and nothing was downloaded"""

    artifact: Optional[ReleaseArtifact] = None
    """Download metadata used (None when already present)"""


class VersionInstaller:
    """
    Downloads, unpacks and registers toolchain versions.

    Example:
        >>> installer = VersionInstaller(context)
        >>> result = installer.install("0.13.0")
        >>> print(f"Installed at: {result.path}")
    """

    def __init__(
        self,
        context: Context,
        progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    ):
        self.context = context
        self.progress_callback = progress_callback

    def install(self, request: str) -> InstallResult:
        """
        Install the version named by request.

        Args:
            request: ``master`` or a ``major.minor.patch`` string

        Returns:
            InstallResult describing the outcome

        Raises:
            InvalidVersionError: If request is not a valid version
            NoVersionsFoundError: If ``master`` cannot be resolved
            VersionNotFoundError: If the version is not in the remote index
            PlatformNotSupportedError: If there is no build for this platform
            DownloadError: If the archive cannot be downloaded
            ExtractionFailedError: If the archive cannot be unpacked
            OSError: If the version directory cannot be created
        """
        version = self.context.index.resolve(request)
        return self.install_version(version)

    def install_version(self, version: VersionId) -> InstallResult:
        """Install a concrete version. See install() for the failure modes."""
        ctx = self.context
        artifact = ctx.index.metadata_for(version, ctx.platform)
        version_dir = ctx.paths.version_dir(version)

        try:
            version_dir.mkdir()
        except FileExistsError:
            logger.info(f"Version {version} already exists at {version_dir}")
            if not ctx.registry.is_installed(version):
                logger.warning(
                    f"Warning: {version_dir} is not registered. "
                    f"Run 'zvpms remove {version}' and install again to repair it."
                )
            return InstallResult(version=version, path=version_dir, already_present=True)

        logger.info(f"Downloading Zig {version} from: {artifact.tarball_url}")
        archive_path = version_dir / artifact.filename
        self._download(artifact, archive_path, version_dir)
        size_mb = archive_path.stat().st_size / 1024 / 1024
        logger.info(f"Downloaded {archive_path.name} ({size_mb:.1f} MB)")

        logger.info(f"Extracting {archive_path.name}")
        extract_archive(archive_path, version_dir, strip_components=1)

        try:
            archive_path.unlink()
        except OSError as e:
            logger.debug(f"Could not delete {archive_path}: {e}")

        ctx.registry.add(version)
        ctx.save()

        logger.info(f"Successfully installed Zig {version}")
        return InstallResult(
            version=version, path=version_dir, already_present=False, artifact=artifact
        )

    def _download(
        self, artifact: ReleaseArtifact, archive_path: Path, version_dir: Path
    ) -> None:
        """Download the archive, removing version_dir again on any failure."""
        settings = self.context.settings
        expected = artifact.checksum if settings.verify_checksums else None
        if settings.verify_checksums and not artifact.checksum:
            logger.warning(f"Warning: no checksum published for {artifact.filename}")

        try:
            download_file(
                artifact.tarball_url,
                archive_path,
                expected_sha256=expected or None,
                progress_callback=self.progress_callback,
                timeout=settings.download_timeout,
                max_bytes=settings.max_download_bytes,
            )
        except (DownloadError, OSError) as e:
            logger.debug(f"Download of Zig {artifact.version} failed, removing {version_dir}: {e}")
            try:
                remove_tree(version_dir)
            except OSError as cleanup_error:
                logger.debug(f"Could not remove {version_dir}: {cleanup_error}")
            raise
