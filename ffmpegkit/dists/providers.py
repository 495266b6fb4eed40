"""
Provider selection: one release provider per supported platform.
"""

import logging
from typing import Dict, Optional, Type

from ffmpegkit.core.models import InstallOptions
from ffmpegkit.core.platform import normalize_platform
from ffmpegkit.core.tool_cache import ToolCache
from ffmpegkit.dists.base import BaseProvider
from ffmpegkit.dists.evermeet import EvermeetProvider
from ffmpegkit.dists.gyan import GyanProvider
from ffmpegkit.dists.johnvansickle import JohnVanSickleProvider

logger = logging.getLogger(__name__)

PROVIDERS: Dict[str, Type[BaseProvider]] = {
    "windows": GyanProvider,
    "linux": JohnVanSickleProvider,
    "macos": EvermeetProvider,
}


def select_provider(
    platform: str, options: InstallOptions, tool_cache: Optional[ToolCache] = None
) -> BaseProvider:
    """
    Create the release provider for a platform.

    Args:
        platform: 'windows', 'linux' or 'macos' (or 'win32' / 'darwin')
        options: Install options, forwarded to the provider unchanged
        tool_cache: Tool cache the provider installs into

    Returns:
        Provider instance

    Raises:
        UnsupportedPlatformError: For any other platform
    """
    provider_cls = PROVIDERS[normalize_platform(platform)]
    logger.debug(f"Using {provider_cls.name} builds for {platform}")
    return provider_cls(options, tool_cache=tool_cache)


__all__ = ["PROVIDERS", "select_provider"]
