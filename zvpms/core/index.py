"""
Remote version index.

The index is one JSON document keyed by version string. Each version maps
``<arch>-<os>`` platform keys to download metadata:

    {
      "master": {...},
      "0.13.0": {
        "date": "2024-06-07",
        "x86_64-linux": {"tarball": "https://...", "shasum": "d45312e6...", "size": "47082308"},
        ...
      }
    }

Only keys that parse as ``major.minor.patch`` take part in "latest" lookups;
channel keys such as ``master`` are skipped. Resolving the ``master`` alias
therefore yields the newest stable release.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from zvpms.core.download import fetch as http_fetch
from zvpms.core.exceptions import (
    InvalidVersionError,
    ManifestError,
    NoVersionsFoundError,
    PlatformNotSupportedError,
    VersionNotFoundError,
)
from zvpms.core.platform import PlatformInfo
from zvpms.core.version import VersionId, is_master_alias, parse_version

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], bytes]


@dataclass(frozen=True)
class ReleaseArtifact:
    """Download metadata for one version on one platform."""

    version: VersionId
    tarball_url: str
    checksum: str
    size: Optional[int] = None

    @property
    def filename(self) -> str:
        """Archive file name taken from the last URL path segment."""
        path = self.tarball_url.split("?", 1)[0].split("#", 1)[0]
        return path.rstrip("/").rsplit("/", 1)[-1]


class RemoteIndex:
    """
    Queries the remote version index.

    The document is fetched on first use and reused for the lifetime of the
    instance (one command invocation).

    Example:
        >>> index = RemoteIndex("https://ziglang.org/download/index.json")
        >>> index.latest_overall()
        VersionId(major=0, minor=13, patch=0)
        >>> index.metadata_for(parse_version("0.13.0"), detect_platform())
        ReleaseArtifact(version=..., tarball_url='https://...', ...)
    """

    def __init__(self, url: str, fetcher: Optional[Fetcher] = None):
        """
        Args:
            url: Location of the index document
            fetcher: Callable returning the body for a URL (default: HTTP GET)
        """
        self.url = url
        self.fetcher = fetcher or http_fetch
        self._manifest: Optional[Dict[str, Any]] = None

    @property
    def manifest(self) -> Dict[str, Any]:
        """
        The parsed index document.

        Raises:
            HttpRequestFailedError: If the index cannot be fetched
            ManifestError: If the body is not a JSON object
        """
        if self._manifest is None:
            logger.debug(f"Loading remote index from {self.url}")
            body = self.fetcher(self.url)
            try:
                data = json.loads(body)
            except (ValueError, UnicodeDecodeError) as e:
                raise ManifestError(f"Remote index at {self.url} is not valid JSON: {e}") from e
            if not isinstance(data, dict):
                raise ManifestError(f"Remote index at {self.url} is not a JSON object")
            self._manifest = data
        return self._manifest

    def versions(self) -> List[VersionId]:
        """All index keys that are plain version triples, unordered."""
        found = []
        for key in self.manifest:
            try:
                found.append(parse_version(key))
            except InvalidVersionError:
                continue
        return found

    def metadata_for(self, version: VersionId, platform: PlatformInfo) -> ReleaseArtifact:
        """
        Look up the download for version on platform.

        Raises:
            VersionNotFoundError: If the index has no entry for version
            PlatformNotSupportedError: If version has no build for platform
            ManifestError: If the platform entry lacks a tarball URL
        """
        entry = self.manifest.get(str(version))
        if not isinstance(entry, dict):
            raise VersionNotFoundError(version)

        platform_key = platform.platform_key()
        artifact = entry.get(platform_key)
        if not isinstance(artifact, dict):
            raise PlatformNotSupportedError(version, platform_key)

        tarball = artifact.get("tarball")
        if not isinstance(tarball, str) or not tarball:
            raise ManifestError(f"Index entry {version}/{platform_key} has no tarball URL")

        shasum = artifact.get("shasum")
        return ReleaseArtifact(
            version=version,
            tarball_url=tarball,
            checksum=shasum if isinstance(shasum, str) else "",
            size=_parse_size(artifact.get("size")),
        )

    def latest_overall(self) -> VersionId:
        """
        Newest release in the index.

        Raises:
            NoVersionsFoundError: If no key is a version triple
        """
        versions = self.versions()
        if not versions:
            raise NoVersionsFoundError(f"No versions found in remote index {self.url}")
        return max(versions)

    def latest_in_series(self, major: int, minor: int) -> Optional[VersionId]:
        """Highest patch release of ``major.minor``, or None if the series is absent."""
        series: Tuple[int, int] = (major, minor)
        candidates = [v for v in self.versions() if v.series == series]
        return max(candidates) if candidates else None

    def resolve(self, request: str) -> VersionId:
        """
        Turn a user request into a concrete version.

        ``master`` resolves to latest_overall(); anything else must parse as
        a version triple. Parsing happens before the index is fetched.

        Raises:
            InvalidVersionError: If request is neither the alias nor a triple
            NoVersionsFoundError: If the alias cannot be resolved
        """
        if is_master_alias(request):
            version = self.latest_overall()
            logger.info(f"Resolved 'master' to version {version}")
            return version
        return parse_version(request)


def _parse_size(value: Any) -> Optional[int]:
    # The index publishes sizes as decimal strings
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None
