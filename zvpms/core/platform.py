"""
Platform detection for zvpms.

The remote index keys downloads by ``<arch>-<os>`` (e.g. ``x86_64-linux``,
``aarch64-macos``). This module maps the running interpreter's platform onto
those names.

Usage:
    from zvpms.core.platform import detect_platform

    info = detect_platform()
    print(info.platform_key())  # 'x86_64-linux'
"""

import functools
import platform
from dataclasses import dataclass

UNKNOWN = "unknown"

_OS_NAMES = {
    "linux": "linux",
    "windows": "windows",
    "darwin": "macos",
    "freebsd": "freebsd",
    "netbsd": "netbsd",
}

_ARCH_NAMES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "armv7l": "armv7a",
    "armv7": "armv7a",
    "riscv64": "riscv64",
    "ppc64le": "powerpc64le",
    "s390x": "s390x",
    "loongarch64": "loongarch64",
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Operating system and CPU architecture, in remote index naming.

    Attributes:
        os: Operating system ('linux', 'windows', 'macos', ...)
        arch: CPU architecture ('x86_64', 'aarch64', ...)
    """

    os: str
    arch: str

    def platform_key(self) -> str:
        """
        Key of this platform's entry inside a remote index version.

        Example:
            >>> PlatformInfo('linux', 'x86_64').platform_key()
            'x86_64-linux'
        """
        return f"{self.arch}-{self.os}"

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.os == "windows" else ""

    def __str__(self) -> str:
        return self.platform_key()


def current_os() -> str:
    """Normalized operating system name, or 'unknown'."""
    return _OS_NAMES.get(platform.system().lower(), UNKNOWN)


def current_arch() -> str:
    """Normalized CPU architecture name, or 'unknown'."""
    return _ARCH_NAMES.get(platform.machine().lower(), UNKNOWN)


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect the current platform.

    Cached: detection runs once per process.
    """
    return PlatformInfo(os=current_os(), arch=current_arch())


def clear_platform_cache():
    """Clear the detect_platform() cache (used by tests)."""
    detect_platform.cache_clear()
