"""
Toolchain version identifiers.

A VersionId is a plain ``major.minor.patch`` triple. The symbolic alias
``master`` is accepted on the command line but is never stored or compared:
it must be resolved against the remote index first (see RemoteIndex.resolve).

Usage:
    from zvpms.core.version import parse_version

    version = parse_version("0.13.0")
    print(version.series)  # (0, 13)
"""

import re
from dataclasses import dataclass
from typing import Tuple

from zvpms.core.exceptions import InvalidVersionError

MASTER_ALIAS = "master"

_COMPONENT_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, order=True)
class VersionId:
    """
    Concrete toolchain version.

    Ordering and equality compare ``(major, minor, patch)`` lexicographically.

    Attributes:
        major: Major version number
        minor: Minor version number
        patch: Patch version number
    """

    major: int
    minor: int
    patch: int

    def __post_init__(self):
        """Reject negative components."""
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"Version components must be non-negative: {self!r}")

    @property
    def series(self) -> Tuple[int, int]:
        """``(major, minor)`` pair shared by all patches of a release series."""
        return (self.major, self.minor)

    def __str__(self) -> str:
        """Format as ``major.minor.patch``."""
        return f"{self.major}.{self.minor}.{self.patch}"


def parse_version(text: str) -> VersionId:
    """
    Parse a ``major.minor.patch`` string.

    Exactly three dot-separated, non-negative decimal integers are accepted.
    Pre-release or build suffixes, signs, whitespace and extra or missing
    components are rejected.

    Args:
        text: Version string (e.g., "0.13.0")

    Returns:
        Parsed VersionId

    Raises:
        InvalidVersionError: If text is not a valid triple

    Example:
        >>> parse_version("0.11.2")
        VersionId(major=0, minor=11, patch=2)
        >>> parse_version("0.12")
        Traceback (most recent call last):
        ...
        zvpms.core.exceptions.InvalidVersionError: Invalid version '0.12': ...
    """
    if not isinstance(text, str):
        raise InvalidVersionError(str(text))

    parts = text.split(".")
    if len(parts) != 3:
        raise InvalidVersionError(text)

    if not all(_COMPONENT_RE.fullmatch(part) for part in parts):
        raise InvalidVersionError(text)

    major, minor, patch = (int(part) for part in parts)
    return VersionId(major, minor, patch)


def is_master_alias(text: str) -> bool:
    """Return True if text names the ``master`` alias."""
    return text == MASTER_ALIAS
