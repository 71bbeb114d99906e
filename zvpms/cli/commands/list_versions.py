"""
List command implementation.

Prints installed versions in registration order, marking the current one.
"""


def run(args, context) -> int:
    """
    Run the list command.

    Args:
        args: Parsed arguments (unused)
        context: Invocation context

    Returns:
        Exit code (always 0)
    """
    registry = context.registry
    print("Installed versions:")
    for version in registry.installed:
        marker = " (current)" if version == registry.current else ""
        print(f"  {version}{marker}")
    return 0
