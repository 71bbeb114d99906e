"""
Update command implementation.

Installs the newest patch release of a version's ``major.minor`` series.
The older patch stays installed; remove it separately if no longer needed.
"""

import logging

from zvpms.cli.utils import log_download_progress
from zvpms.toolchain.installer import VersionInstaller
from zvpms.toolchain.lifecycle import update_version

logger = logging.getLogger(__name__)


def run(args, context) -> int:
    """
    Run the update command.

    Args:
        args: Parsed arguments with ``version``
        context: Invocation context

    Returns:
        Exit code (0 for success, including "already latest")
    """
    installer = VersionInstaller(context, progress_callback=log_download_progress)
    update_version(context, args.version, installer=installer)
    return 0
