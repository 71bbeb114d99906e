"""
Per-invocation state shared by every operation.

A Context is built once per command: it resolves the directory layout, reads
settings, loads the registry, and prepares the remote index. Operations take
the context explicitly and call save() after mutating ``registry``.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from zvpms.core.directory import ZvpmsPaths, default_paths
from zvpms.core.download import fetch
from zvpms.core.index import Fetcher, RemoteIndex
from zvpms.core.platform import PlatformInfo, detect_platform
from zvpms.core.registry import Registry, RegistryStore
from zvpms.core.settings import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass
class Context:
    """Everything one command invocation operates on."""

    paths: ZvpmsPaths
    settings: Settings
    store: RegistryStore
    registry: Registry
    index: RemoteIndex
    platform: PlatformInfo
    load_warnings: List[str]

    @classmethod
    def create(
        cls,
        paths: Optional[ZvpmsPaths] = None,
        settings: Optional[Settings] = None,
        platform: Optional[PlatformInfo] = None,
        fetcher: Optional[Fetcher] = None,
        store: Optional[RegistryStore] = None,
    ) -> "Context":
        """
        Build a context, loading the registry from disk.

        Registry repairs made while loading are logged as warnings and kept
        in ``load_warnings``.

        Args:
            paths: Directory layout (default: resolved from the environment)
            settings: Settings (default: read from paths.settings_file)
            platform: Target platform (default: detected)
            fetcher: URL fetcher for the remote index (default: HTTP GET)
            store: Registry store (default: paths.registry_file)

        Raises:
            DirectoryError: If the root cannot be resolved or created
            SettingsError: If the settings file is malformed
        """
        paths = (paths or default_paths()).ensure_structure()
        settings = settings or load_settings(paths.settings_file)
        store = store or RegistryStore(
            paths.registry_file, paths.lock_file, settings.lock_timeout
        )

        if fetcher is None:

            def fetcher(url: str) -> bytes:
                return fetch(
                    url,
                    timeout=settings.download_timeout,
                    max_bytes=settings.max_download_bytes,
                )

        result = store.load()
        for warning in result.warnings:
            logger.warning(f"Warning: {warning}")

        return cls(
            paths=paths,
            settings=settings,
            store=store,
            registry=result.registry,
            index=RemoteIndex(settings.index_url, fetcher),
            platform=platform or detect_platform(),
            load_warnings=list(result.warnings),
        )

    def save(self) -> None:
        """Persist the in-memory registry."""
        self.store.save(self.registry)
