"""
Releases command: list the versions offered for this platform.
"""

import logging

from ffmpegkit.cli.commands.install import build_config
from ffmpegkit.core.exceptions import UnsupportedBuildError
from ffmpegkit.core.platform import current_platform
from ffmpegkit.core.retry import with_retry
from ffmpegkit.core.versions import sort_versions
from ffmpegkit.dists.providers import select_provider

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the releases command.

    Prints one version per line, newest first.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = build_config(args)
    provider = select_provider(args.platform or current_platform(), config.install_options())

    releases = with_retry(
        provider.get_available_releases,
        fatal=(UnsupportedBuildError,),
        **config.retry_policy().as_kwargs(),
    )
    logger.debug(f"{len(releases)} releases available")

    for version in sort_versions(release.version for release in releases):
        print(version)
    return 0
