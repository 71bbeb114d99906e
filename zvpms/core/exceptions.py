"""
Centralized exception hierarchy for zvpms.

Every error a command can report to the user derives from ZvpmsError so the
CLI can turn it into a message and a non-zero exit code in one place.
"""


# ============================================================================
# Base Exceptions
# ============================================================================


class ZvpmsError(Exception):
    """Base exception for all zvpms errors."""

    pass


# ============================================================================
# Version Exceptions
# ============================================================================


class InvalidVersionError(ZvpmsError):
    """Version string is not a plain ``major.minor.patch`` triple."""

    def __init__(self, text: str):
        self.text = text
        super().__init__(
            f"Invalid version '{text}': expected MAJOR.MINOR.PATCH (e.g. 0.13.0)"
        )


class VersionNotInstalledError(ZvpmsError):
    """Raised when an operation targets a version missing from the registry."""

    def __init__(self, version):
        self.version = version
        super().__init__(f"Version {version} is not installed")


class VersionAlreadyExistsError(ZvpmsError):
    """Raised when a rename target is already registered."""

    def __init__(self, version):
        self.version = version
        super().__init__(f"Version {version} already exists")


# ============================================================================
# Remote Index Exceptions
# ============================================================================


class ManifestError(ZvpmsError):
    """Remote version manifest could not be parsed."""

    pass


class VersionNotFoundError(ManifestError):
    """Version is absent from the remote manifest."""

    def __init__(self, version):
        self.version = version
        super().__init__(f"Version {version} not found in the remote index")


class PlatformNotSupportedError(ManifestError):
    """Version exists remotely but has no build for this platform."""

    def __init__(self, version, platform_key: str):
        self.version = version
        self.platform_key = platform_key
        super().__init__(f"Version {version} has no download for {platform_key}")


class NoVersionsFoundError(ManifestError):
    """Alias or series resolution produced no candidate."""

    pass


# ============================================================================
# Download / Extraction Exceptions
# ============================================================================


class DownloadError(ZvpmsError):
    """Base exception for download failures."""

    pass


class HttpRequestFailedError(DownloadError):
    """HTTP request failed (connection error or non-200 status)."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"HTTP request to {url} failed: {reason}")


class ResponseTooLargeError(DownloadError):
    """Response body exceeds the configured size limit."""

    def __init__(self, url: str, limit_bytes: int):
        self.url = url
        self.limit_bytes = limit_bytes
        super().__init__(
            f"Response from {url} exceeds the {limit_bytes // (1024 * 1024)} MB limit"
        )


class ChecksumMismatchError(DownloadError):
    """Downloaded archive does not match the published checksum."""

    pass


class ExtractionFailedError(ZvpmsError):
    """Archive could not be unpacked into the version directory."""

    pass


# ============================================================================
# Local State Exceptions
# ============================================================================


class RegistryError(ZvpmsError):
    """Registry file could not be written."""

    pass


class RegistryLockTimeout(RegistryError):
    """Raised when the registry lock cannot be acquired within timeout."""

    pass


class SettingsError(ZvpmsError):
    """Settings file is malformed."""

    pass


class DirectoryError(ZvpmsError):
    """Root directory cannot be determined or created."""

    pass
