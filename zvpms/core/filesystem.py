"""
File system utilities for zvpms.

This module provides the on-disk primitives the version state engine needs:
- Archive extraction that strips the leading path component (tar.*, zip)
- Atomic whole-file writes for the registry
- Directory removal and rename helpers for version directories

Toolchain archives ship their contents under a single top-level directory
(``zig-linux-x86_64-0.13.0/...``). Extraction drops that first component so a
version directory holds the toolchain's own files directly.
"""

import lzma
import os
import shutil
import sys
import tarfile
import tempfile
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from zvpms.core.exceptions import ExtractionFailedError

IS_WINDOWS = os.name == "nt"

_TAR_MODES = (
    ((".tar.xz", ".txz"), "r:xz"),
    ((".tar.gz", ".tgz"), "r:gz"),
    ((".tar.bz2", ".tbz2"), "r:bz2"),
    ((".tar",), "r:"),
)


def is_relative_to(path: Path, parent: Path) -> bool:
    """Check if path is under parent directory."""
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


# ============================================================================
# Archive Extraction
# ============================================================================


def _strip_components(name: str, count: int) -> Optional[str]:
    """
    Drop the first ``count`` components of an archive member name.

    Returns None when nothing is left (the stripped directory itself).
    """
    parts = [part for part in PurePosixPath(name.replace("\\", "/")).parts if part != "."]
    if len(parts) <= count:
        return None
    return "/".join(parts[count:])


def _validate_member_path(name: str, destination: Path) -> None:
    """
    Ensure an archive member lands inside destination.

    Raises:
        ExtractionFailedError: If the member escapes via '..' or an absolute path
    """
    member_path = (destination / name).resolve()
    if not is_relative_to(member_path, destination.resolve()):
        raise ExtractionFailedError(
            f"Archive member '{name}' attempts directory traversal; extraction blocked"
        )


def extract_archive(
    archive_path: Union[str, Path],
    destination: Union[str, Path],
    strip_components: int = 1,
) -> None:
    """
    Extract an archive into destination, stripping leading path components.

    The format is detected from the file name:
    - .tar.xz, .tar.gz, .tar.bz2, .tar (and short forms)
    - .zip

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract into (created if missing)
        strip_components: Number of leading path components to drop

    Raises:
        ExtractionFailedError: If the format is unknown, the archive is
            corrupt, or a member would escape destination

    Example:
        >>> extract_archive('zig-linux-x86_64-0.13.0.tar.xz', versions / '0.13.0')
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ExtractionFailedError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)
    archive_name = archive_path.name.lower()

    try:
        if archive_name.endswith(".zip"):
            _extract_zip(archive_path, destination, strip_components)
            return

        for suffixes, mode in _TAR_MODES:
            if archive_name.endswith(suffixes):
                _extract_tar(archive_path, destination, mode, strip_components)
                return
    except ExtractionFailedError:
        raise
    except (
        tarfile.TarError,
        zipfile.BadZipFile,
        lzma.LZMAError,
        zlib.error,
        OSError,
        EOFError,
    ) as e:
        raise ExtractionFailedError(f"Failed to extract {archive_path.name}: {e}") from e

    raise ExtractionFailedError(
        f"Unsupported archive format: {archive_path.name}. "
        "Supported: .tar.xz, .tar.gz, .tar.bz2, .tar, .zip"
    )


def _extract_tar(
    archive_path: Path, destination: Path, mode: str, strip_components: int
) -> None:
    """Extract a tar archive with the given compression mode."""
    with tarfile.open(archive_path, mode) as tar:
        members = []
        for member in tar.getmembers():
            stripped = _strip_components(member.name, strip_components)
            if stripped is None:
                continue
            _validate_member_path(stripped, destination)
            member.name = stripped
            if member.islnk():
                linked = _strip_components(member.linkname, strip_components)
                if linked is None:
                    continue
                member.linkname = linked
            members.append(member)

        # The "data" filter is available on 3.12+ and recent security releases
        if hasattr(tarfile, "data_filter"):
            tar.extractall(destination, members=members, filter="data")
        else:
            tar.extractall(destination, members=members)


def _extract_zip(archive_path: Path, destination: Path, strip_components: int) -> None:
    """Extract a ZIP archive."""
    with zipfile.ZipFile(archive_path, "r") as zf:
        entries = []
        for info in zf.infolist():
            stripped = _strip_components(info.filename, strip_components)
            if stripped is None:
                continue
            _validate_member_path(stripped, destination)
            entries.append((info, stripped))

        for info, stripped in entries:
            target = destination / stripped
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            with zf.open(info) as source, open(target, "wb") as sink:
                shutil.copyfileobj(source, sink)


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    The target is never observed in a partially-written state: either the
    previous content or the complete new content is on disk.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        temp_path.replace(file_path)

    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise


def remove_tree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree, handling read-only files on Windows.

    A missing path is not an error.

    Raises:
        OSError: If deletion fails
    """
    path = Path(path)
    if not path.exists():
        return

    if IS_WINDOWS:

        def handle_remove_readonly(func, target, exc):
            """Clear the read-only bit and retry."""
            os.chmod(target, 0o777)
            func(target)

        if sys.version_info >= (3, 12):
            shutil.rmtree(path, onexc=handle_remove_readonly)
        else:
            shutil.rmtree(path, onerror=handle_remove_readonly)
    else:
        shutil.rmtree(path)


def rename_directory(source: Union[str, Path], target: Union[str, Path]) -> None:
    """
    Rename a directory, refusing to replace an existing target.

    Raises:
        FileNotFoundError: If source does not exist
        FileExistsError: If target already exists
        OSError: If the rename itself fails
    """
    source = Path(source)
    target = Path(target)

    if not source.exists():
        raise FileNotFoundError(f"Directory not found: {source}")
    if target.exists():
        raise FileExistsError(f"Target directory already exists: {target}")

    source.rename(target)


__all__ = [
    "extract_archive",
    "atomic_write",
    "remove_tree",
    "rename_directory",
    "is_relative_to",
]
