"""Rename command: move an installed version to a new version name."""

from zvpms.core.version import parse_version
from zvpms.toolchain.lifecycle import rename_version


def run(args, context) -> int:
    old = parse_version(args.old)
    new = parse_version(args.new)
    rename_version(context, old, new)
    return 0
