"""Command implementations. Each module exposes ``run(args, context) -> int``."""
