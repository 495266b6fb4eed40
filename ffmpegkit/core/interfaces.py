"""
Core interfaces for ffmpegkit.

The install orchestrator depends only on these interfaces, never on a
concrete provider, so it cannot tell which distribution source it is using.
"""

from abc import ABC, abstractmethod
from typing import List

from ffmpegkit.core.models import InstalledTool, ReleaseInfo


class ReleaseProvider(ABC):
    """
    Abstract interface for a platform-specific source of ffmpeg builds.

    Implementations are constructed with the install options and may use
    the architecture, linking type and token they carry.
    """

    @abstractmethod
    def get_available_releases(self) -> List[ReleaseInfo]:
        """
        List all releases this provider can install.

        Returns:
            Releases in provider order; versions are concrete semver strings

        Raises:
            Any network or parsing error; callers retry these
        """
        pass

    @abstractmethod
    def get_latest_release(self) -> ReleaseInfo:
        """
        Fetch the latest release, or the latest git build when the install
        options request 'git'.
        """
        pass

    @abstractmethod
    def download_tool(self, release: ReleaseInfo) -> InstalledTool:
        """
        Download, verify and extract a release into the tool cache.

        Args:
            release: Release previously returned by this provider

        Returns:
            The installed tool's version and path
        """
        pass


__all__ = ["ReleaseProvider"]
