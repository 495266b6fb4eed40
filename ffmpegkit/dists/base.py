"""
Shared behaviour for the concrete ffmpeg release providers.

Subclasses only describe where releases come from; BaseProvider turns a
ReleaseInfo into a cached installation:
1. Download the archive from the first working mirror
2. Verify its checksum (unless the integrity check is skipped)
3. Extract it into a temporary directory
4. Locate the directory holding the ffmpeg executable
5. Copy that directory into the tool cache
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Sequence
from urllib.parse import urlparse

from ffmpegkit.core.download import download_file
from ffmpegkit.core.exceptions import ProviderError, UnsupportedBuildError
from ffmpegkit.core.filesystem import (
    extract_archive,
    find_executable_dir,
    temporary_directory,
)
from ffmpegkit.core.interfaces import ReleaseProvider
from ffmpegkit.core.models import InstalledTool, InstallOptions, ReleaseInfo
from ffmpegkit.core.tool_cache import ToolCache

logger = logging.getLogger(__name__)

_GITHUB_HOSTS = ("github.com", "api.github.com", "objects.githubusercontent.com")


def git_build_version(build_id: str) -> str:
    """
    Version for a git (nightly) build.

    Git builds carry no release number, so they are versioned as a
    prerelease of 0.0.0 keyed by their build identifier. They stay valid
    semver and sort below every tagged release.

    Example:
        >>> git_build_version("20240301")
        '0.0.0-git.20240301'
    """
    return f"0.0.0-git.{build_id}"


def is_git_request(options: InstallOptions) -> bool:
    return options.version.lower() == "git"


class BaseProvider(ReleaseProvider):
    """Base class implementing download_tool for archive-based providers."""

    #: Human readable source name used in log messages
    name = "ffmpeg"

    #: install_options.architecture -> provider architecture label
    architectures: Dict[str, str] = {}

    #: Linking types the provider can build
    linking_types = ("static",)

    def __init__(self, options: InstallOptions, tool_cache: Optional[ToolCache] = None):
        self.options = options
        self.tool_cache = tool_cache or ToolCache()

    @property
    def arch(self) -> str:
        """Provider architecture label for the requested architecture."""
        self._check_architecture()
        return self.architectures[self.options.architecture]

    def _check_architecture(self) -> None:
        if self.options.architecture not in self.architectures:
            supported = ", ".join(sorted(self.architectures))
            raise UnsupportedBuildError(
                f"{self.name} has no builds for architecture "
                f"'{self.options.architecture}' (supported: {supported})"
            )

    def _check_linking_type(self) -> None:
        if self.options.linking_type not in self.linking_types:
            raise UnsupportedBuildError(
                f"{self.name} does not provide '{self.options.linking_type}' builds "
                f"(supported: {', '.join(self.linking_types)})"
            )

    def check_options(self) -> None:
        """
        Validate the install options against what this provider builds.

        Raises:
            UnsupportedBuildError: On an unsupported architecture or linking type
        """
        self._check_architecture()
        self._check_linking_type()

    def _headers_for(self, url: str) -> Optional[Dict[str, str]]:
        """Authorization headers for GitHub hosts; the token never leaves GitHub."""
        if not self.options.github_token:
            return None
        if urlparse(url).hostname not in _GITHUB_HOSTS:
            return None
        return {"Authorization": f"Bearer {self.options.github_token}"}

    def download_tool(self, release: ReleaseInfo) -> InstalledTool:
        """Download a release archive and install it into the tool cache."""
        self.check_options()
        if not release.download_urls:
            raise ProviderError(f"Release {release.version} has no download URLs")
        checksum_urls = () if self.options.skip_integrity_check else release.checksum_urls
        if self.options.skip_integrity_check:
            logger.debug("Skipping integrity check")

        with temporary_directory() as tmp:
            extract_dir = tmp / "extract"
            self._download_and_extract(release, tmp, extract_dir, checksum_urls)

            tool_dir = find_executable_dir(extract_dir, "ffmpeg")
            if tool_dir is None:
                raise ProviderError(
                    f"No ffmpeg executable found in {self.name} archive for "
                    f"{release.version}"
                )

            path = self.tool_cache.cache_dir(
                tool_dir,
                self.options.tool_cache_dir,
                release.version,
                self.options.architecture,
            )

        logger.info(f"Installed ffmpeg {release.version} to {path}")
        return InstalledTool(version=release.version, path=path)

    def _download_and_extract(
        self,
        release: ReleaseInfo,
        download_dir: Path,
        extract_dir: Path,
        checksum_urls: Sequence[str],
    ) -> None:
        """Download the release archive and extract it into ``extract_dir``."""
        archive = download_file(
            release.download_urls,
            download_dir,
            checksum_urls=checksum_urls,
            headers_for=self._headers_for,
        )
        extract_archive(archive, extract_dir)


__all__ = ["BaseProvider", "git_build_version", "is_git_request"]
