"""
Linux static builds from johnvansickle.com.

The site publishes the current release and the current git build under
fixed names, with a readme describing each, and keeps earlier releases in
an ``old-releases/`` directory listing.
"""

import logging
import re
from typing import List

from ffmpegkit.core.download import fetch_text
from ffmpegkit.core.exceptions import ProviderError
from ffmpegkit.core.models import ReleaseInfo
from ffmpegkit.core.versions import coerce_version
from ffmpegkit.dists.base import BaseProvider, git_build_version, is_git_request

logger = logging.getLogger(__name__)

BASE_URL = "https://johnvansickle.com/ffmpeg"

_RELEASE_VERSION = re.compile(r"^\s*version:\s*v?(\d+(?:\.\d+){0,2})\s*$", re.MULTILINE)
_GIT_BUILD = re.compile(r"^\s*build:\s*ffmpeg-git-(\d{8})-", re.MULTILINE)


class JohnVanSickleProvider(BaseProvider):
    """Static Linux builds for amd64, i686, arm64 and armhf."""

    name = "johnvansickle.com"
    architectures = {
        "x64": "amd64",
        "x86": "i686",
        "ia32": "i686",
        "arm64": "arm64",
        "arm": "armhf",
    }

    def get_latest_release(self) -> ReleaseInfo:
        self.check_options()
        if is_git_request(self.options):
            return self._latest_git_build()
        return self._latest_release()

    def _latest_release(self) -> ReleaseInfo:
        readme = fetch_text(f"{BASE_URL}/release-readme.txt")
        match = _RELEASE_VERSION.search(readme)
        if not match:
            raise ProviderError(f"Could not find release version in {self.name} readme")

        url = f"{BASE_URL}/releases/ffmpeg-release-{self.arch}-static.tar.xz"
        return ReleaseInfo(
            version=coerce_version(match.group(1)),
            download_urls=(url,),
            checksum_urls=(f"{url}.md5",),
        )

    def _latest_git_build(self) -> ReleaseInfo:
        readme = fetch_text(f"{BASE_URL}/git-readme.txt")
        match = _GIT_BUILD.search(readme)
        if not match:
            raise ProviderError(f"Could not find git build date in {self.name} readme")

        url = f"{BASE_URL}/builds/ffmpeg-git-{self.arch}-static.tar.xz"
        return ReleaseInfo(
            version=git_build_version(match.group(1)),
            download_urls=(url,),
            is_git_release=True,
            checksum_urls=(f"{url}.md5",),
        )

    def get_available_releases(self) -> List[ReleaseInfo]:
        """Current release first, then the old releases in listing order."""
        self.check_options()
        releases = [self._latest_release()]
        seen = {releases[0].version}

        listing = fetch_text(f"{BASE_URL}/old-releases/")
        pattern = re.compile(
            rf'href="(ffmpeg-(\d+(?:\.\d+){{0,2}})-{re.escape(self.arch)}-static\.tar\.xz)"'
        )
        for filename, raw_version in pattern.findall(listing):
            version = coerce_version(raw_version)
            if version in seen:
                continue
            seen.add(version)
            releases.append(
                ReleaseInfo(
                    version=version,
                    download_urls=(f"{BASE_URL}/old-releases/{filename}",),
                )
            )

        logger.debug(f"Found {len(releases)} {self.name} releases for {self.arch}")
        return releases


__all__ = ["JohnVanSickleProvider", "BASE_URL"]
