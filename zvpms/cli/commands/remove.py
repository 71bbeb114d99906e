"""Remove command: unregister a version and delete its files."""

from zvpms.core.version import parse_version
from zvpms.toolchain.lifecycle import remove_version


def run(args, context) -> int:
    # A directory that cannot be deleted is reported as a warning only
    remove_version(context, parse_version(args.version))
    return 0
