"""
Core functionality for zvpms.

This package holds the version state engine: version parsing, the persisted
registry, the remote index and the filesystem/network primitives beneath them.
"""

from .exceptions import (
    ZvpmsError,
    InvalidVersionError,
    VersionNotInstalledError,
    VersionAlreadyExistsError,
    ManifestError,
    VersionNotFoundError,
    PlatformNotSupportedError,
    NoVersionsFoundError,
    DownloadError,
    HttpRequestFailedError,
    ResponseTooLargeError,
    ChecksumMismatchError,
    ExtractionFailedError,
    RegistryError,
    RegistryLockTimeout,
    SettingsError,
    DirectoryError,
)
from .version import MASTER_ALIAS, VersionId, is_master_alias, parse_version
from .registry import Registry, RegistryLoadResult, RegistryStore
from .index import ReleaseArtifact, RemoteIndex

__all__ = [
    "ZvpmsError",
    "InvalidVersionError",
    "VersionNotInstalledError",
    "VersionAlreadyExistsError",
    "ManifestError",
    "VersionNotFoundError",
    "PlatformNotSupportedError",
    "NoVersionsFoundError",
    "DownloadError",
    "HttpRequestFailedError",
    "ResponseTooLargeError",
    "ChecksumMismatchError",
    "ExtractionFailedError",
    "RegistryError",
    "RegistryLockTimeout",
    "SettingsError",
    "DirectoryError",
    "MASTER_ALIAS",
    "VersionId",
    "is_master_alias",
    "parse_version",
    "Registry",
    "RegistryLoadResult",
    "RegistryStore",
    "ReleaseArtifact",
    "RemoteIndex",
]
