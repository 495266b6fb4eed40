"""
macOS builds from evermeet.cx.

The site describes its current release and snapshot builds through a JSON
info endpoint, keeps every release under ``/pub/ffmpeg/``, and ships
ffprobe as a separate archive that is installed next to ffmpeg.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Sequence

from ffmpegkit.core.download import (
    archive_file_name,
    download_file,
    fetch_json,
    fetch_text,
)
from ffmpegkit.core.exceptions import ProviderError
from ffmpegkit.core.filesystem import extract_archive
from ffmpegkit.core.models import ReleaseInfo
from ffmpegkit.core.versions import coerce_version
from ffmpegkit.dists.base import BaseProvider, git_build_version, is_git_request

logger = logging.getLogger(__name__)

BASE_URL = "https://evermeet.cx"
INFO_URL = f"{BASE_URL}/ffmpeg/info"
PUB_URL = f"{BASE_URL}/pub"

_RELEASE_LINK = re.compile(r'href="(ffmpeg-(\d+(?:\.\d+){0,2})\.zip)"')
_SNAPSHOT_VERSION = re.compile(r"^N-(\d+)-")


class EvermeetProvider(BaseProvider):
    """Static builds for Intel macOS."""

    name = "evermeet.cx"
    architectures = {"x64": "x64"}

    def _info(self, tool: str, channel: str) -> Dict[str, Any]:
        info = fetch_json(f"{INFO_URL}/{tool}/{channel}")
        if not isinstance(info, dict) or not isinstance(info.get("version"), str):
            raise ProviderError(f"Unexpected {self.name} info response for {tool}")
        return info

    def _zip_url(self, info: Dict[str, Any]) -> str:
        try:
            return info["download"]["zip"]["url"]
        except (KeyError, TypeError) as e:
            raise ProviderError(f"No zip download in {self.name} info response") from e

    def get_latest_release(self) -> ReleaseInfo:
        self.check_options()
        if is_git_request(self.options):
            return self._latest_snapshot()

        info = self._info("ffmpeg", "release")
        try:
            version = coerce_version(info["version"])
        except ValueError as e:
            raise ProviderError(
                f"Unexpected {self.name} release version: {info['version']!r}"
            ) from e
        return ReleaseInfo(version=version, download_urls=(self._zip_url(info),))

    def _latest_snapshot(self) -> ReleaseInfo:
        info = self._info("ffmpeg", "snapshot")
        match = _SNAPSHOT_VERSION.match(info["version"])
        if not match:
            raise ProviderError(f"Unexpected {self.name} snapshot version: {info['version']!r}")
        return ReleaseInfo(
            version=git_build_version(match.group(1)),
            download_urls=(self._zip_url(info),),
            is_git_release=True,
        )

    def get_available_releases(self) -> List[ReleaseInfo]:
        """Every release in the ``/pub/ffmpeg/`` listing, in listing order."""
        self.check_options()
        listing = fetch_text(f"{PUB_URL}/ffmpeg/")

        releases: List[ReleaseInfo] = []
        seen = set()
        for filename, raw_version in _RELEASE_LINK.findall(listing):
            version = coerce_version(raw_version)
            if version in seen:
                continue
            seen.add(version)
            releases.append(
                ReleaseInfo(version=version, download_urls=(f"{PUB_URL}/ffmpeg/{filename}",))
            )

        logger.debug(f"Found {len(releases)} {self.name} releases")
        return releases

    def ffprobe_urls(self, release: ReleaseInfo) -> List[str]:
        """Download URLs of the ffprobe archive matching a release."""
        if release.is_git_release:
            return [self._zip_url(self._info("ffprobe", "snapshot"))]

        filename = archive_file_name(release.download_urls[0])
        return [f"{PUB_URL}/ffprobe/{filename.replace('ffmpeg', 'ffprobe', 1)}"]

    def _download_and_extract(
        self,
        release: ReleaseInfo,
        download_dir: Path,
        extract_dir: Path,
        checksum_urls: Sequence[str],
    ) -> None:
        super()._download_and_extract(release, download_dir, extract_dir, checksum_urls)

        logger.info(f"Installing ffprobe {release.version}")
        archive = download_file(self.ffprobe_urls(release), download_dir / "ffprobe")
        extract_archive(archive, extract_dir)


__all__ = ["EvermeetProvider", "BASE_URL", "INFO_URL", "PUB_URL"]
