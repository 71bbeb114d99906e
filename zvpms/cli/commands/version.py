"""Version command: show the zvpms version and the selected Zig version."""

from zvpms import __version__


def run(args, context) -> int:
    print(f"zvpms {__version__}")
    current = context.registry.current
    if current is not None:
        print(f"Current Zig version: {current}")
    else:
        print("No Zig version currently set")
    return 0
