"""
Directory layout for zvpms.

Directory Structure (``~/.zvpms`` or ``%USERPROFILE%\\.zvpms``):
    - config.json          : registry of installed versions and the current one
    - settings.yaml        : optional user settings
    - versions/<version>/  : extracted toolchain, one directory per version
    - lock/config.lock     : advisory lock for mutating commands

``ZVPMS_HOME`` overrides the root location.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from zvpms.core.exceptions import DirectoryError
from zvpms.core.version import VersionId

HOME_ENV_VAR = "ZVPMS_HOME"
ROOT_DIR_NAME = ".zvpms"
EXECUTABLE_NAME = "zig"


def get_zvpms_home(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get the per-user root directory.

    Args:
        environ: Environment mapping (default: os.environ)

    Returns:
        Path: ``$ZVPMS_HOME`` if set, else ``<home>/.zvpms`` where home is
            USERPROFILE on Windows and HOME elsewhere.

    Raises:
        DirectoryError: If no home directory can be determined
    """
    if environ is None:
        environ = os.environ

    override = environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()

    home_var = "USERPROFILE" if os.name == "nt" else "HOME"
    home = environ.get(home_var)
    if not home:
        raise DirectoryError(
            f"{home_var} environment variable is not set. "
            f"Set {HOME_ENV_VAR} to choose where toolchains are stored."
        )
    return Path(home) / ROOT_DIR_NAME


@dataclass(frozen=True)
class ZvpmsPaths:
    """Resolved locations under one zvpms root."""

    root: Path

    @property
    def versions_dir(self) -> Path:
        return self.root / "versions"

    @property
    def registry_file(self) -> Path:
        return self.root / "config.json"

    @property
    def settings_file(self) -> Path:
        return self.root / "settings.yaml"

    @property
    def lock_file(self) -> Path:
        return self.root / "lock" / "config.lock"

    def version_dir(self, version: Union[VersionId, str]) -> Path:
        """Directory holding the extracted files of version."""
        return self.versions_dir / str(version)

    def executable_path(self, version: Union[VersionId, str], suffix: str = "") -> Path:
        """Compiler executable inside version's directory."""
        return self.version_dir(version) / f"{EXECUTABLE_NAME}{suffix}"

    def ensure_structure(self) -> "ZvpmsPaths":
        """
        Create the root and versions directories if missing.

        Raises:
            DirectoryError: If the directories cannot be created
        """
        try:
            self.versions_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(f"Cannot create {self.versions_dir}: {e}") from e
        return self


def default_paths() -> ZvpmsPaths:
    """Paths rooted at get_zvpms_home()."""
    return ZvpmsPaths(get_zvpms_home())
