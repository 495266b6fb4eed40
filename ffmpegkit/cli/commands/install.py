"""
Install command: install ffmpeg into the tool cache.

Inside a GitHub Actions workflow the result is published as the step
outputs ffmpeg-version, ffmpeg-path and cache-hit, and the install
directory is added to PATH for later steps.
"""

import logging
from dataclasses import replace
from pathlib import Path

from ffmpegkit.cli.utils import add_path, set_output
from ffmpegkit.config.parser import FFmpegKitConfig, apply_overrides, load_config
from ffmpegkit.core.models import InstallResult
from ffmpegkit.core.retry import CancellationToken
from ffmpegkit.core.tool_cache import ToolCache
from ffmpegkit.dists.installer import install

logger = logging.getLogger(__name__)


def build_config(args) -> FFmpegKitConfig:
    """
    Merge configuration file, action inputs and command-line flags.

    Raises:
        ConfigError: If any source holds an invalid value
    """
    config = load_config(args.config)
    config = apply_overrides(
        config,
        {
            "version": args.ffmpeg_version,
            "architecture": args.architecture,
            "linking_type": args.linking_type,
            "github_token": args.github_token,
            "skip_integrity_check": True if args.skip_integrity_check else None,
            "tool_cache_dir": args.tool_cache_dir,
        },
    )

    retry = config.retry
    if args.max_attempts is not None:
        retry = replace(retry, max_attempts=args.max_attempts)
    if args.initial_delay_ms is not None:
        retry = replace(retry, initial_delay_ms=args.initial_delay_ms)
    config = replace(config, retry=retry)

    if args.tool_cache_root is not None:
        config = replace(config, tool_cache_root=str(args.tool_cache_root))
    return config


def publish_result(result: InstallResult) -> None:
    """Expose the install result to later workflow steps."""
    set_output("ffmpeg-version", result.version)
    set_output("ffmpeg-path", str(result.path))
    set_output("cache-hit", "true" if result.cache_hit else "false")
    add_path(result.path)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    config = build_config(args)
    options = config.install_options()
    logger.debug(f"Install options: {options!r}")

    root = Path(config.tool_cache_root) if config.tool_cache_root else None
    cancellation = None
    if args.timeout:
        cancellation = CancellationToken.with_timeout(args.timeout)

    result = install(
        options,
        tool_cache=ToolCache(root=root),
        retry_policy=config.retry_policy(),
        cancellation=cancellation,
    )

    source = "tool cache" if result.cache_hit else "download"
    print(f"ffmpeg {result.version} ({source}): {result.path}")
    publish_result(result)
    return 0
