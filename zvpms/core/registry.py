"""
Persisted registry of installed toolchain versions.

The registry is a single JSON document (``config.json``):

    {
      "current_version": "0.13.0",
      "installed_versions": ["0.11.0", "0.13.0"]
    }

It is loaded once per invocation, mutated in memory, and rewritten in full
after every mutation. A missing, empty or unreadable file never blocks a
command: it is treated as an empty registry, and anything discarded along
the way is reported through RegistryLoadResult.warnings.
"""

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from filelock import FileLock, Timeout

from zvpms.core.exceptions import InvalidVersionError, RegistryError, RegistryLockTimeout
from zvpms.core.filesystem import atomic_write
from zvpms.core.version import VersionId, parse_version

logger = logging.getLogger(__name__)


@dataclass
class Registry:
    """
    Installed versions and the current selection.

    ``installed`` keeps insertion order and holds no duplicates.
    ``current``, when set, names a member of ``installed``.
    """

    current: Optional[VersionId] = None
    installed: List[VersionId] = field(default_factory=list)

    def is_installed(self, version: VersionId) -> bool:
        return version in self.installed

    def add(self, version: VersionId) -> bool:
        """Append version unless present. Returns True if it was added."""
        if version in self.installed:
            return False
        self.installed.append(version)
        return True

    def discard(self, version: VersionId) -> bool:
        """
        Remove version if present, clearing ``current`` when it pointed there.

        Returns True if version was registered.
        """
        if self.current == version:
            self.current = None
        if version not in self.installed:
            return False
        self.installed.remove(version)
        return True

    def replace(self, old: VersionId, new: VersionId) -> None:
        """Rename old to new in place, keeping its position and selection."""
        index = self.installed.index(old)
        self.installed[index] = new
        if self.current == old:
            self.current = new

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_version": str(self.current) if self.current else None,
            "installed_versions": [str(v) for v in self.installed],
        }


@dataclass
class RegistryLoadResult:
    """Registry read from disk plus anything that was discarded to produce it."""

    registry: Registry
    warnings: List[str] = field(default_factory=list)


def registry_from_dict(data: Any) -> RegistryLoadResult:
    """
    Build a Registry from parsed JSON.

    A document of the wrong shape yields an empty registry with a warning.
    Unparseable or duplicate version entries are dropped, and a current
    version that is not installed is cleared; each such repair adds a warning.
    """
    if not isinstance(data, dict):
        return RegistryLoadResult(
            Registry(), ["registry is not a JSON object; starting with an empty registry"]
        )

    raw_installed = data.get("installed_versions", [])
    raw_current = data.get("current_version")

    if not isinstance(raw_installed, list) or not (
        raw_current is None or isinstance(raw_current, str)
    ):
        return RegistryLoadResult(
            Registry(), ["registry fields have unexpected types; starting with an empty registry"]
        )

    registry = Registry()
    warnings = []

    for entry in raw_installed:
        try:
            version = parse_version(entry)
        except InvalidVersionError:
            warnings.append(f"dropping invalid installed version entry: {entry!r}")
            continue
        registry.add(version)

    if raw_current is not None:
        try:
            current = parse_version(raw_current)
        except InvalidVersionError:
            current = None
        if current is not None and registry.is_installed(current):
            registry.current = current
        else:
            warnings.append(
                f"current version {raw_current!r} is not installed; clearing selection"
            )

    return RegistryLoadResult(registry, warnings)


class RegistryStore:
    """
    Reads and writes the registry file.

    Example:
        >>> store = RegistryStore(Path.home() / ".zvpms" / "config.json")
        >>> result = store.load()
        >>> result.registry.add(parse_version("0.13.0"))
        >>> store.save(result.registry)
    """

    def __init__(
        self,
        registry_path: Path,
        lock_path: Optional[Path] = None,
        lock_timeout: float = 30,
    ):
        """
        Initialize registry store.

        Args:
            registry_path: Path to config.json
            lock_path: Advisory lock file (default: <dir>/lock/config.lock)
            lock_timeout: Timeout in seconds for acquiring the lock
        """
        self.registry_path = Path(registry_path)
        self.lock_path = (
            Path(lock_path)
            if lock_path is not None
            else self.registry_path.parent / "lock" / "config.lock"
        )
        self.lock_timeout = lock_timeout

    def load(self) -> RegistryLoadResult:
        """
        Load the registry from disk.

        Never raises for bad content: a missing or empty file gives an empty
        registry, and an unparseable one gives an empty registry plus a
        warning describing what was discarded.
        """
        if not self.registry_path.exists():
            logger.debug("Registry file not found, starting empty")
            return RegistryLoadResult(Registry())

        try:
            text = self.registry_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            return RegistryLoadResult(
                Registry(), [f"cannot read {self.registry_path}: {e}; starting empty"]
            )

        if not text.strip():
            return RegistryLoadResult(Registry())

        try:
            data = json.loads(text)
        except (ValueError, RecursionError) as e:
            return RegistryLoadResult(
                Registry(), [f"{self.registry_path} is not valid JSON ({e}); starting empty"]
            )

        return registry_from_dict(data)

    def save(self, registry: Registry) -> None:
        """
        Rewrite the registry file with registry's full content.

        Raises:
            RegistryError: If the file cannot be written
        """
        content = json.dumps(registry.to_dict(), indent=2) + "\n"
        try:
            atomic_write(self.registry_path, content)
        except OSError as e:
            raise RegistryError(f"Failed to save registry: {e}") from e

        logger.debug(f"Saved registry with {len(registry.installed)} versions")

    @contextmanager
    def lock(self):
        """
        Hold the exclusive advisory lock around a load-mutate-save sequence.

        Raises:
            RegistryLockTimeout: If the lock cannot be acquired within timeout
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(str(self.lock_path), timeout=self.lock_timeout)

        try:
            lock.acquire()
        except Timeout as e:
            raise RegistryLockTimeout(
                f"Could not acquire registry lock within {self.lock_timeout} seconds. "
                "Another zvpms process may be running."
            ) from e

        logger.debug("Acquired registry lock")
        try:
            yield
        finally:
            lock.release()
            logger.debug("Released registry lock")
