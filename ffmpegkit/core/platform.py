"""
Platform detection for ffmpegkit.

This module detects the current operating system and CPU architecture and
normalizes them to the identifiers used for provider selection and tool
cache keys.

Usage:
    from ffmpegkit.core.platform import detect_platform, current_platform

    platform_info = detect_platform()
    print(f"OS: {platform_info.os}")
    print(f"Architecture: {platform_info.arch}")
"""

import functools
import platform
from dataclasses import dataclass

from ffmpegkit.core.exceptions import UnsupportedPlatformError

SUPPORTED_PLATFORMS = ("windows", "linux", "macos")

# Aliases as reported by sys.platform / os.platform()
_PLATFORM_ALIASES = {
    "windows": "windows",
    "win32": "windows",
    "linux": "linux",
    "macos": "macos",
    "darwin": "macos",
}


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information.

    Attributes:
        os: Operating system ('windows', 'linux', 'macos') or the raw
            lowercased system name when unsupported
        arch: CPU architecture ('x64', 'arm64', 'x86', 'arm')
    """

    os: str
    arch: str

    def platform_string(self) -> str:
        """
        Get canonical platform string (e.g., 'linux-x64', 'macos-arm64').

        Example:
            >>> PlatformInfo('linux', 'x64').platform_string()
            'linux-x64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.platform_string()


def normalize_platform(name: str) -> str:
    """
    Normalize a platform identifier.

    Args:
        name: Platform identifier ('linux', 'win32', 'darwin', 'macos', ...)

    Returns:
        One of 'windows', 'linux', 'macos'

    Raises:
        UnsupportedPlatformError: If the identifier is outside the supported set
    """
    normalized = _PLATFORM_ALIASES.get(name.lower())
    if normalized is None:
        raise UnsupportedPlatformError(name)
    return normalized


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.
    """
    return PlatformInfo(os=_detect_os(), arch=detect_architecture())


def current_platform() -> str:
    """Identifier of the running operating system, unvalidated."""
    return detect_platform().os


def _detect_os() -> str:
    """
    Detect operating system.

    Returns:
        'windows', 'linux', 'macos', or the lowercased system name
    """
    system = platform.system().lower()

    if system == "windows":
        return "windows"
    elif system == "linux":
        return "linux"
    elif system == "darwin":
        return "macos"
    else:
        return system


def detect_architecture() -> str:
    """
    Detect CPU architecture.

    Returns:
        Normalized architecture: 'x64', 'arm64', 'x86', 'arm'
    """
    machine = platform.machine().lower()

    if machine in ("x86_64", "amd64", "x64"):
        return "x64"
    elif machine in ("aarch64", "arm64"):
        return "arm64"
    elif machine in ("i386", "i686", "x86"):
        return "x86"
    elif machine.startswith("arm"):
        return "arm"
    else:
        # Return original for unknown architectures
        return machine


def clear_platform_cache():
    """
    Clear the platform detection cache.

    Useful for testing or when platform information changes.
    """
    detect_platform.cache_clear()


__all__ = [
    "SUPPORTED_PLATFORMS",
    "PlatformInfo",
    "normalize_platform",
    "detect_platform",
    "current_platform",
    "detect_architecture",
    "clear_platform_cache",
]
