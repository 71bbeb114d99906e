"""
zvpms command-line interface.

Management commands are parsed with argparse. Any other first argument
switches to proxy mode: it and everything after it are handed to the current
Zig executable unchanged, so ``zvpms build -Doptimize=ReleaseFast`` behaves
like ``zig build -Doptimize=ReleaseFast``.
"""

import argparse
import importlib
import logging
import sys
import traceback
from contextlib import ExitStack
from typing import List, Optional

from zvpms.context import Context
from zvpms.core.directory import ZvpmsPaths, default_paths
from zvpms.core.exceptions import ZvpmsError
from zvpms.core.index import Fetcher
from zvpms.core.platform import PlatformInfo
from zvpms.core.registry import RegistryStore
from zvpms.core.settings import load_settings
from zvpms.toolchain.proxy import run_proxy

logger = logging.getLogger(__name__)

COMMAND_MODULES = {
    "install": "zvpms.cli.commands.install",
    "use": "zvpms.cli.commands.use",
    "list": "zvpms.cli.commands.list_versions",
    "remove": "zvpms.cli.commands.remove",
    "rename": "zvpms.cli.commands.rename",
    "update": "zvpms.cli.commands.update",
    "version": "zvpms.cli.commands.version",
}

# Commands that rewrite the registry hold the registry lock throughout
MUTATING_COMMANDS = frozenset({"install", "use", "remove", "rename", "update"})

MANAGEMENT_COMMANDS = frozenset(COMMAND_MODULES) | {"help"}

EPILOG = """\
Zig compiler proxy:
  zvpms <zig-args>...        Run zig with the current version
  zvpms build                Build using current Zig version
  zvpms run                  Run using current Zig version
  zvpms test                 Test using current Zig version
  zvpms fmt                  Format using current Zig version

Examples:
  zvpms install 0.13.0
  zvpms install master
  zvpms use 0.13.0
  zvpms update 0.12.0
  zvpms build --release=fast
  zvpms run -- --help
  zvpms zen
"""


class CLI:
    """zvpms command-line interface."""

    def __init__(
        self,
        paths: Optional[ZvpmsPaths] = None,
        platform: Optional[PlatformInfo] = None,
        fetcher: Optional[Fetcher] = None,
    ):
        """
        Initialize CLI.

        Args:
            paths: Directory layout (default: resolved from the environment)
            platform: Target platform (default: detected)
            fetcher: URL fetcher for the remote index (default: HTTP GET)
        """
        self.paths = paths
        self.platform = platform
        self.fetcher = fetcher
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all management subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="zvpms",
            description="zvpms - Zig version manager and proxy",
            epilog=EPILOG,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        common = argparse.ArgumentParser(add_help=False)
        common.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        common.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )

        subparsers = parser.add_subparsers(
            dest="command", title="version management commands", metavar="COMMAND"
        )

        install = subparsers.add_parser(
            "install",
            parents=[common],
            help="Install a specific Zig version",
            description="Download and install a Zig version ('master' selects the newest release)",
        )
        install.add_argument("version", metavar="VERSION", help="e.g. 0.13.0 or master")

        use = subparsers.add_parser(
            "use", parents=[common], help="Set the current Zig version"
        )
        use.add_argument("version", metavar="VERSION")

        subparsers.add_parser("list", parents=[common], help="List installed versions")

        remove = subparsers.add_parser(
            "remove", parents=[common], help="Remove an installed version"
        )
        remove.add_argument("version", metavar="VERSION")

        rename = subparsers.add_parser(
            "rename", parents=[common], help="Rename an installed version"
        )
        rename.add_argument("old", metavar="OLD")
        rename.add_argument("new", metavar="NEW")

        update = subparsers.add_parser(
            "update",
            parents=[common],
            help="Install the latest patch release of a version's series",
        )
        update.add_argument("version", metavar="VERSION")

        subparsers.add_parser("version", parents=[common], help="Show zvpms version")
        subparsers.add_parser("help", parents=[common], help="Show this help message")

        return parser

    def parse_args(self, args: Optional[List[str]] = None):
        """
        Parse management command arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Parsed arguments namespace
        """
        return self.parser.parse_args(args)

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run CLI with given arguments.

        Args:
            args: Arguments to parse (uses sys.argv if None)

        Returns:
            Exit code (0 for success, non-zero for error; in proxy mode the
            compiler's exit code)
        """
        argv = list(sys.argv[1:] if args is None else args)

        if not argv:
            self.parser.print_help()
            return 0

        if argv[0] not in MANAGEMENT_COMMANDS:
            self._configure_logging(verbose=False, quiet=False)
            return self._guard(self._run_proxy, argv, verbose=False)

        parsed_args = self.parse_args(argv)
        self._configure_logging(parsed_args.verbose, parsed_args.quiet)

        if parsed_args.command == "help":
            self.parser.print_help()
            return 0

        return self._guard(self._dispatch_command, parsed_args, verbose=parsed_args.verbose)

    def _guard(self, handler, payload, verbose: bool) -> int:
        """Run handler, turning reported errors into exit codes."""
        try:
            return handler(payload)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except (ZvpmsError, OSError) as e:
            logger.error(f"Error: {e}")
            if verbose:
                traceback.print_exc()
            return 1

    def _configure_logging(self, verbose: bool, quiet: bool):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            verbose: DEBUG output with logger names
            quiet: errors only
        """
        if verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif quiet:
            level = logging.ERROR
            format_str = "%(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _create_context(self, store_lock: bool, stack: ExitStack) -> Context:
        """
        Build the invocation context, taking the registry lock first if asked.

        The lock is released when stack closes.
        """
        paths = (self.paths or default_paths()).ensure_structure()
        settings = load_settings(paths.settings_file)
        store = RegistryStore(paths.registry_file, paths.lock_file, settings.lock_timeout)
        if store_lock:
            stack.enter_context(store.lock())

        return Context.create(
            paths=paths,
            settings=settings,
            platform=self.platform,
            fetcher=self.fetcher,
            store=store,
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        module_name = COMMAND_MODULES.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)

        with ExitStack() as stack:
            context = self._create_context(args.command in MUTATING_COMMANDS, stack)
            return module.run(args, context)

    def _run_proxy(self, argv: List[str]) -> int:
        """Forward argv to the current Zig executable."""
        with ExitStack() as stack:
            context = self._create_context(False, stack)
            return run_proxy(context, argv)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
