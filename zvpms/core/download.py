"""
Network primitives: whole-body fetch and streaming file download.

This module provides:
- fetch(): GET a URL into memory (used for the remote index)
- download_file(): stream a URL to disk with progress reporting, a size
  limit and optional SHA-256 verification (used for toolchain archives)

Neither function retries; a failed request surfaces immediately as
HttpRequestFailedError so the caller can roll back.
"""

import hashlib
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from requests.exceptions import RequestException

from zvpms.core.exceptions import (
    ChecksumMismatchError,
    HttpRequestFailedError,
    ResponseTooLargeError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60
DEFAULT_MAX_BYTES = 500 * 1024 * 1024
CHUNK_SIZE = 64 * 1024


@dataclass
class DownloadProgress:
    """Progress information for a download."""

    bytes_downloaded: int
    total_bytes: int
    percentage: float
    speed_bps: float  # bytes per second
    eta_seconds: float  # estimated time remaining

    def __str__(self) -> str:
        """Format progress for display."""
        return format_progress(self)


def _open(url: str, timeout: Optional[float]) -> requests.Response:
    """Issue a streaming GET and reject non-200 responses."""
    try:
        response = requests.get(
            url, stream=True, timeout=timeout, allow_redirects=True
        )
    except RequestException as e:
        raise HttpRequestFailedError(url, str(e)) from e

    if response.status_code != 200:
        response.close()
        raise HttpRequestFailedError(url, f"status {response.status_code}")

    return response


def _declared_length(response: requests.Response) -> int:
    content_length = response.headers.get("content-length")
    try:
        return int(content_length) if content_length else 0
    except ValueError:
        return 0


def fetch(
    url: str,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> bytes:
    """
    Fetch a URL and return the response body.

    Args:
        url: URL to fetch
        timeout: Request timeout in seconds (None waits indefinitely)
        max_bytes: Largest accepted body size

    Returns:
        Response body

    Raises:
        HttpRequestFailedError: On connection failure or non-200 status
        ResponseTooLargeError: If the body exceeds max_bytes
    """
    logger.debug(f"Fetching {url}")
    response = _open(url, timeout)

    with response:
        if _declared_length(response) > max_bytes:
            raise ResponseTooLargeError(url, max_bytes)

        body = bytearray()
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                body.extend(chunk)
                if len(body) > max_bytes:
                    raise ResponseTooLargeError(url, max_bytes)
        except RequestException as e:
            raise HttpRequestFailedError(url, str(e)) from e

    return bytes(body)


def download_file(
    url: str,
    destination: Path,
    expected_sha256: Optional[str] = None,
    progress_callback: Optional[Callable[[DownloadProgress], None]] = None,
    timeout: Optional[float] = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> Path:
    """
    Stream a URL to destination.

    The file is written as chunks arrive so large archives are never held in
    memory. On failure the partially written file is left for the caller to
    clean up together with its directory.

    Args:
        url: URL to download from
        destination: Local path to save file
        expected_sha256: SHA-256 hex digest to verify (skipped when None)
        progress_callback: Optional callback for progress updates
        timeout: Request timeout in seconds (None waits indefinitely)
        max_bytes: Largest accepted body size

    Returns:
        Path to downloaded file

    Raises:
        HttpRequestFailedError: On connection failure or non-200 status
        ResponseTooLargeError: If the body exceeds max_bytes
        ChecksumMismatchError: If expected_sha256 does not match
        OSError: If the destination cannot be written

    Example:
        >>> download_file(
        ...     "https://ziglang.org/download/0.13.0/zig-linux-x86_64-0.13.0.tar.xz",
        ...     version_dir / "zig-linux-x86_64-0.13.0.tar.xz",
        ...     progress_callback=lambda p: print(p),
        ... )
    """
    destination = Path(destination)
    logger.info(f"Downloading from {url}")

    response = _open(url, timeout)
    hasher = hashlib.sha256() if expected_sha256 else None

    with response:
        total_size = _declared_length(response)
        if total_size > max_bytes:
            raise ResponseTooLargeError(url, max_bytes)

        downloaded = 0
        start_time = time.time()
        last_progress_time = start_time

        try:
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if not chunk:
                        continue
                    downloaded += len(chunk)
                    if downloaded > max_bytes:
                        raise ResponseTooLargeError(url, max_bytes)

                    f.write(chunk)
                    if hasher:
                        hasher.update(chunk)

                    # Report at most twice per second
                    current_time = time.time()
                    if progress_callback and (
                        current_time - last_progress_time >= 0.5
                        or downloaded == total_size
                    ):
                        progress_callback(
                            _progress(downloaded, total_size, current_time - start_time)
                        )
                        last_progress_time = current_time
        except RequestException as e:
            raise HttpRequestFailedError(url, str(e)) from e

    if hasher and expected_sha256:
        actual = hasher.hexdigest()
        if actual.lower() != expected_sha256.lower():
            raise ChecksumMismatchError(
                f"Checksum mismatch for {destination.name}: "
                f"expected {expected_sha256}, got {actual}"
            )
        logger.debug("Checksum verified successfully")

    logger.debug(f"Download complete: {destination} ({downloaded} bytes)")
    return destination


def _progress(downloaded: int, total_size: int, elapsed: float) -> DownloadProgress:
    speed = downloaded / elapsed if elapsed > 0 else 0
    remaining = total_size - downloaded if total_size > 0 else 0
    return DownloadProgress(
        bytes_downloaded=downloaded,
        total_bytes=total_size if total_size > 0 else downloaded,
        percentage=(downloaded / total_size * 100) if total_size > 0 else 0,
        speed_bps=speed,
        eta_seconds=remaining / speed if speed > 0 else 0,
    )


def format_progress(progress: DownloadProgress) -> str:
    """
    Format progress for display.

    Example:
        >>> progress = DownloadProgress(52428800, 104857600, 50.0, 1048576, 50)
        >>> print(format_progress(progress))
        50.0/100.0 MB (50.0%) at 1.0 MB/s ETA: 50s
    """
    mb_downloaded = progress.bytes_downloaded / 1024 / 1024
    mb_total = progress.total_bytes / 1024 / 1024
    speed_mbps = progress.speed_bps / 1024 / 1024

    if progress.total_bytes > 0 and progress.percentage > 0:
        return (
            f"{mb_downloaded:.1f}/{mb_total:.1f} MB "
            f"({progress.percentage:.1f}%) "
            f"at {speed_mbps:.1f} MB/s "
            f"ETA: {progress.eta_seconds:.0f}s"
        )
    return f"{mb_downloaded:.1f} MB at {speed_mbps:.1f} MB/s"
