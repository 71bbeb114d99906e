"""
Toolchain operations for zvpms.

This package builds on zvpms.core to install, manage and run toolchain
versions.
"""

from .installer import InstallResult, VersionInstaller
from .lifecycle import (
    UpdateResult,
    UpdateStatus,
    remove_version,
    rename_version,
    set_current_version,
    update_version,
)
from .proxy import ProxyExitCode, run_proxy

__all__ = [
    "InstallResult",
    "VersionInstaller",
    "UpdateResult",
    "UpdateStatus",
    "remove_version",
    "rename_version",
    "set_current_version",
    "update_version",
    "ProxyExitCode",
    "run_proxy",
]
