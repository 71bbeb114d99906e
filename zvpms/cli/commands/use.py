"""Use command: select the current Zig version."""

from zvpms.core.version import parse_version
from zvpms.toolchain.lifecycle import set_current_version


def run(args, context) -> int:
    set_current_version(context, parse_version(args.version))
    return 0
