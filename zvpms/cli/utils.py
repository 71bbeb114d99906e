"""
Shared utilities for CLI commands.
"""

import logging

from zvpms.core.download import DownloadProgress

logger = logging.getLogger(__name__)


def log_download_progress(progress: DownloadProgress) -> None:
    """Progress callback for archive downloads (visible with --verbose)."""
    logger.debug(f"  {progress}")
