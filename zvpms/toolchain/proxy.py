"""
Proxy dispatch to the current toolchain's compiler.

``zvpms build --release=fast`` runs ``<root>/versions/<current>/zig build
--release=fast`` with the caller's stdin, stdout and stderr, and exits with
the compiler's exit code.
"""

import enum
import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from zvpms.context import Context

logger = logging.getLogger(__name__)


class ProxyExitCode(enum.IntEnum):
    """Exit codes the proxy itself produces (the child's code is passed through)."""

    NO_VERSION_SELECTED = 2
    EXECUTABLE_MISSING = 3
    CHILD_SIGNALED = 4


def executable_path(context: Context) -> Optional[Path]:
    """Compiler path of the current version, or None if none is selected."""
    current = context.registry.current
    if current is None:
        return None
    return context.paths.executable_path(current, context.platform.executable_suffix)


def run_proxy(context: Context, args: Sequence[str]) -> int:
    """
    Run the current version's compiler with args.

    Args:
        context: Invocation context
        args: Arguments forwarded verbatim

    Returns:
        The compiler's exit code, or a ProxyExitCode when it could not run
        or was killed by a signal
    """
    current = context.registry.current
    if current is None:
        logger.error(
            "No Zig version is currently set. Use 'zvpms use <version>' to set one."
        )
        return ProxyExitCode.NO_VERSION_SELECTED

    executable = executable_path(context)
    if not executable.is_file():
        logger.error(f"Zig executable not found at: {executable}")
        logger.error(
            f"The installation might be corrupted. Try reinstalling version {current}"
        )
        return ProxyExitCode.EXECUTABLE_MISSING

    command = [str(executable), *args]
    logger.debug(f"Running: {command}")

    # Streams are inherited, not captured
    process = subprocess.Popen(command)
    while True:
        try:
            returncode = process.wait()
            break
        except KeyboardInterrupt:
            # The child received the same SIGINT; let it decide how to exit
            continue

    if returncode < 0:
        logger.error(f"Zig process terminated by signal: {-returncode}")
        return ProxyExitCode.CHILD_SIGNALED

    return returncode
