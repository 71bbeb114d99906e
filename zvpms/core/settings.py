"""
User settings loaded from ``<root>/settings.yaml``.

The file is optional; every key has a default. Example:

    index_url: https://ziglang.org/download/index.json
    download_timeout: 120
    max_download_mb: 500
    verify_checksums: true
    lock_timeout: 30
"""

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from zvpms.core.exceptions import SettingsError

logger = logging.getLogger(__name__)

DEFAULT_INDEX_URL = "https://ziglang.org/download/index.json"
INDEX_URL_ENV_VAR = "ZVPMS_INDEX_URL"


@dataclass(frozen=True)
class Settings:
    """Effective settings for one invocation."""

    index_url: str = DEFAULT_INDEX_URL
    download_timeout: Optional[float] = 60
    max_download_mb: int = 500
    verify_checksums: bool = False
    lock_timeout: float = 30

    @property
    def max_download_bytes(self) -> int:
        return self.max_download_mb * 1024 * 1024


def _check_type(key: str, value: Any) -> Any:
    """Validate one settings value, returning the normalized value."""
    if key == "index_url":
        if not isinstance(value, str) or not value.strip():
            raise SettingsError("index_url must be a non-empty string")
        return value.strip()

    if key == "verify_checksums":
        if not isinstance(value, bool):
            raise SettingsError("verify_checksums must be true or false")
        return value

    if key == "download_timeout" and value is None:
        return None

    # bool is an int subclass; reject it for numeric keys
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise SettingsError(f"{key} must be a positive number")
    if key == "max_download_mb":
        return int(value)
    return value


def settings_from_mapping(data: Mapping[str, Any]) -> Settings:
    """
    Build Settings from a parsed mapping.

    Unknown keys are ignored.

    Raises:
        SettingsError: If a known key has an invalid value
    """
    known = {f.name for f in fields(Settings)}
    values: Dict[str, Any] = {}

    for key, value in data.items():
        if key not in known:
            logger.debug(f"Ignoring unknown setting: {key}")
            continue
        values[key] = _check_type(key, value)

    return Settings(**values)


def load_settings(
    settings_file: Path, environ: Optional[Mapping[str, str]] = None
) -> Settings:
    """
    Load settings from a YAML file, applying environment overrides.

    A missing file yields the defaults.

    Args:
        settings_file: Path to settings.yaml
        environ: Environment mapping (default: os.environ)

    Returns:
        Effective settings

    Raises:
        SettingsError: If the file is not valid YAML or has invalid values
    """
    if environ is None:
        environ = os.environ

    settings = Settings()
    if settings_file.exists():
        logger.debug(f"Loading settings from {settings_file}")
        try:
            with open(settings_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SettingsError(f"Invalid YAML in {settings_file}: {e}") from e
        except OSError as e:
            raise SettingsError(f"Cannot read {settings_file}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise SettingsError(f"{settings_file} must contain a mapping")
        settings = settings_from_mapping(data)

    index_override = environ.get(INDEX_URL_ENV_VAR)
    if index_override:
        settings = replace(settings, index_url=index_override)

    return settings
