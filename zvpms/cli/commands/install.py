"""
Install command implementation.

Downloads and registers a Zig version (``master`` for the newest release).
"""

import logging

from zvpms.cli.utils import log_download_progress
from zvpms.toolchain.installer import VersionInstaller

logger = logging.getLogger(__name__)


def run(args, context) -> int:
    """
    Run the install command.

    Args:
        args: Parsed arguments with ``version``
        context: Invocation context

    Returns:
        Exit code (0 for success)
    """
    installer = VersionInstaller(context, progress_callback=log_download_progress)
    installer.install(args.version)
    return 0
