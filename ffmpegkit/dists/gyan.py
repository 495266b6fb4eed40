"""
Windows builds from gyan.dev.

Tagged releases are mirrored as GitHub releases of GyanD/codexffmpeg; the
gyan.dev site publishes the current release and git build versions as plain
text files and hosts the git build archives with sha256 side files.
"""

import logging
import re
from typing import Any, Dict, List, Optional

from ffmpegkit.core.download import fetch_json, fetch_text
from ffmpegkit.core.exceptions import ProviderError
from ffmpegkit.core.models import ReleaseInfo
from ffmpegkit.core.versions import coerce_version
from ffmpegkit.dists.base import BaseProvider, git_build_version, is_git_request

logger = logging.getLogger(__name__)

BUILDS_URL = "https://www.gyan.dev/ffmpeg/builds"
GITHUB_REPO = "GyanD/codexffmpeg"
GITHUB_API_RELEASES = f"https://api.github.com/repos/{GITHUB_REPO}/releases"
GITHUB_DOWNLOAD_URL = f"https://github.com/{GITHUB_REPO}/releases/download"

# GitHub caps per_page at 100; codexffmpeg has far fewer pages than this
MAX_PAGES = 10

_GIT_VERSION = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-git-[0-9a-f]+$")


class GyanProvider(BaseProvider):
    """Full builds for 64-bit Windows, static or shared."""

    name = "gyan.dev"
    architectures = {"x64": "x64"}
    linking_types = ("static", "shared")

    @property
    def build_suffix(self) -> str:
        return "full_build-shared" if self.options.linking_type == "shared" else "full_build"

    def _asset_name(self, tag: str) -> str:
        return f"ffmpeg-{tag}-{self.build_suffix}.zip"

    def _github_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        headers.update(self._headers_for(GITHUB_API_RELEASES) or {})
        return headers

    def get_latest_release(self) -> ReleaseInfo:
        self.check_options()

        if is_git_request(self.options):
            return self._latest_git_build()

        tag = fetch_text(f"{BUILDS_URL}/release-version").strip()
        try:
            version = coerce_version(tag)
        except ValueError as e:
            raise ProviderError(f"Unexpected {self.name} release version: {tag!r}") from e

        return ReleaseInfo(
            version=version,
            download_urls=(f"{GITHUB_DOWNLOAD_URL}/{tag}/{self._asset_name(tag)}",),
        )

    def _latest_git_build(self) -> ReleaseInfo:
        tag = fetch_text(f"{BUILDS_URL}/git-version").strip()
        match = _GIT_VERSION.match(tag)
        if not match:
            raise ProviderError(f"Unexpected {self.name} git version: {tag!r}")

        archive = (
            "ffmpeg-git-full_build-shared.7z"
            if self.options.linking_type == "shared"
            else "ffmpeg-git-full.7z"
        )
        return ReleaseInfo(
            version=git_build_version("".join(match.groups())),
            download_urls=(
                f"{BUILDS_URL}/{archive}",
                f"{GITHUB_DOWNLOAD_URL}/{tag}/{self._asset_name(tag)}",
            ),
            is_git_release=True,
            checksum_urls=(f"{BUILDS_URL}/{archive}.sha256",),
        )

    def get_available_releases(self) -> List[ReleaseInfo]:
        """Tagged releases from GitHub that carry the requested build."""
        self.check_options()

        releases: List[ReleaseInfo] = []
        for page in range(1, MAX_PAGES + 1):
            entries = fetch_json(
                GITHUB_API_RELEASES,
                headers=self._github_headers(),
                params={"per_page": 100, "page": page},
            )
            if not isinstance(entries, list):
                raise ProviderError(f"Unexpected GitHub API response for {GITHUB_REPO}")
            if not entries:
                break

            for entry in entries:
                release = self._release_from_entry(entry)
                if release is not None:
                    releases.append(release)

        logger.debug(f"Found {len(releases)} {self.name} releases")
        return releases

    def _release_from_entry(self, entry: Dict[str, Any]) -> Optional[ReleaseInfo]:
        tag = entry.get("tag_name", "")
        if entry.get("draft") or entry.get("prerelease"):
            return None
        try:
            version = coerce_version(tag)
        except ValueError:
            logger.debug(f"Skipping non-release tag {tag!r}")
            return None

        wanted = self._asset_name(tag)
        for asset in entry.get("assets", []):
            if asset.get("name") == wanted:
                return ReleaseInfo(
                    version=version,
                    download_urls=(asset["browser_download_url"],),
                )

        logger.debug(f"Release {tag} has no {wanted} asset")
        return None


__all__ = ["GyanProvider", "BUILDS_URL", "GITHUB_API_RELEASES", "GITHUB_DOWNLOAD_URL"]
