"""
ffmpegkit CLI argument parser.

This module implements the command-line interface for ffmpegkit using argparse.
"""

import argparse
import importlib
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional

from requests import RequestException

from ffmpegkit.cli.utils import print_error
from ffmpegkit.core.download import DownloadError
from ffmpegkit.core.exceptions import FFmpegKitError
from ffmpegkit.core.filesystem import FilesystemError
from ffmpegkit.core.platform import SUPPORTED_PLATFORMS

try:
    __version__ = version("ffmpegkit")
except PackageNotFoundError:
    __version__ = "0.1.0"

logger = logging.getLogger(__name__)

#: Errors reported as a failed command rather than a crash
COMMAND_ERRORS = (FFmpegKitError, DownloadError, FilesystemError, RequestException)


class CLI:
    """ffmpegkit command-line interface."""

    def __init__(self):
        """Initialize CLI with argument parser."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """
        Create argument parser with all subcommands.

        Returns:
            Configured ArgumentParser instance
        """
        parser = argparse.ArgumentParser(
            prog="ffmpegkit",
            description="ffmpegkit - install ffmpeg builds into a tool cache",
            epilog='Use "ffmpegkit COMMAND --help" for command-specific help',
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )

        # Global options
        parser.add_argument(
            "--version", action="version", version=f"ffmpegkit {__version__}"
        )
        verbosity = parser.add_mutually_exclusive_group()
        verbosity.add_argument(
            "--verbose", "-v", action="store_true", help="Enable verbose output"
        )
        verbosity.add_argument(
            "--quiet",
            "-q",
            action="store_true",
            help="Enable minimal output (errors only)",
        )
        parser.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to configuration file (default: ./ffmpegkit.yaml)",
        )

        # Subcommands
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands", metavar="COMMAND"
        )

        self._add_install_command(subparsers)
        self._add_releases_command(subparsers)

        return parser

    def _add_build_options(self, parser):
        """Options selecting which build to install or list."""
        parser.add_argument(
            "--ffmpeg-version",
            metavar="VERSION",
            help="Semver range, 'release' or 'git' [default: release]",
        )
        parser.add_argument(
            "--architecture",
            metavar="ARCH",
            help="Target architecture (x64, x86, arm64, arm) [default: this machine]",
        )
        parser.add_argument(
            "--linking-type",
            choices=["static", "shared"],
            metavar="TYPE",
            help="Linking type (static|shared) [default: static]",
        )
        parser.add_argument(
            "--github-token",
            metavar="TOKEN",
            help="Token for GitHub API requests",
        )
        parser.add_argument(
            "--skip-integrity-check",
            action="store_true",
            help="Do not verify download checksums",
        )
        parser.add_argument(
            "--tool-cache-dir",
            metavar="NAME",
            help="Tool name used as the cache directory [default: ffmpeg]",
        )
        parser.add_argument(
            "--tool-cache-root",
            type=Path,
            metavar="PATH",
            help="Tool cache root (default: $RUNNER_TOOL_CACHE or ~/.ffmpegkit/tool-cache)",
        )
        parser.add_argument(
            "--max-attempts",
            type=int,
            metavar="N",
            help="Attempts for each release lookup [default: 5]",
        )
        parser.add_argument(
            "--initial-delay-ms",
            type=int,
            metavar="MS",
            help="Base retry delay in milliseconds [default: 1000]",
        )

    def _add_install_command(self, subparsers):
        """Add 'install' subcommand."""
        parser = subparsers.add_parser(
            "install",
            help="Install ffmpeg",
            description="Resolve, download and cache an ffmpeg build",
        )
        self._add_build_options(parser)
        parser.add_argument(
            "--timeout",
            type=float,
            metavar="SECONDS",
            help="Give up on release lookups after this many seconds",
        )

    def _add_releases_command(self, subparsers):
        """Add 'releases' subcommand."""
        parser = subparsers.add_parser(
            "releases",
            help="List available ffmpeg versions",
            description="List the versions offered for a platform, newest first",
        )
        self._add_build_options(parser)
        parser.add_argument(
            "--platform",
            choices=list(SUPPORTED_PLATFORMS),
            metavar="PLATFORM",
            help="Platform to list releases for (windows|linux|macos) [default: this machine]",
        )

    def parse_args(self, args: Optional[List[str]] = None) -> argparse.Namespace:
        """
        Parse command-line arguments.

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
            Exit code (0 for success, non-zero for error)
        """
        parsed_args = self.parse_args(args)

        # Configure logging
        self._configure_logging(parsed_args)

        # Check if command specified
        if not parsed_args.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        try:
            return self._dispatch_command(parsed_args)
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130  # Standard exit code for SIGINT
        except COMMAND_ERRORS as e:
            print_error(str(e))
            if parsed_args.verbose:
                logger.debug("Command failed", exc_info=True)
            return 1

    def _configure_logging(self, args):
        """
        Configure logging based on verbose/quiet flags.

        Args:
            args: Parsed arguments with verbose/quiet flags
        """
        if args.verbose:
            level = logging.DEBUG
            format_str = "%(levelname)s [%(name)s] %(message)s"
        elif args.quiet:
            level = logging.ERROR
            format_str = "%(levelname)s: %(message)s"
        else:
            level = logging.INFO
            format_str = "%(message)s"

        logging.basicConfig(
            level=level,
            format=format_str,
            force=True,  # Reconfigure if already configured
        )

    def _dispatch_command(self, args) -> int:
        """
        Dispatch to appropriate command handler.

        Args:
            args: Parsed arguments with command field

        Returns:
            Exit code from command handler
        """
        command_map = {
            "install": "ffmpegkit.cli.commands.install",
            "releases": "ffmpegkit.cli.commands.releases",
        }

        module_name = command_map.get(args.command)
        if not module_name:
            logger.error(f"Unknown command: {args.command}")
            return 1

        module = importlib.import_module(module_name)
        return module.run(args)


def main():
    """Main entry point for CLI."""
    cli = CLI()
    sys.exit(cli.run())


if __name__ == "__main__":
    main()
