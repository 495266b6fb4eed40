"""
Unit tests for the johnvansickle.com Linux provider.
"""

import hashlib

import pytest
import responses

from ffmpegkit.core.exceptions import ProviderError, UnsupportedBuildError
from ffmpegkit.core.models import InstallOptions, ReleaseInfo
from ffmpegkit.dists.johnvansickle import BASE_URL, JohnVanSickleProvider

from tests.helpers import make_tar_xz

RELEASE_README = """
              ______ ______
             / ____// ____/____ ___   ____   ___   ____ _
            / /_   / /_   / __ `__ \\ / __ \\ / _ \\ / __ `/

      build: ffmpeg-6.0-amd64-static.tar.xz
    version: 6.0

        gcc: 8.3.0
       yasm: 1.3.0.36-ge2569
"""

GIT_README = """
      build: ffmpeg-git-20240301-amd64-static.tar.xz
    version: 6a6a4e2a7ff2
"""

OLD_RELEASES = """
<html><body><pre>
<a href="ffmpeg-4.2.2-amd64-static.tar.xz">ffmpeg-4.2.2-amd64-static.tar.xz</a>
<a href="ffmpeg-4.2.2-amd64-static.tar.xz.md5">ffmpeg-4.2.2-amd64-static.tar.xz.md5</a>
<a href="ffmpeg-4.4.1-i686-static.tar.xz">ffmpeg-4.4.1-i686-static.tar.xz</a>
<a href="ffmpeg-5.1.1-amd64-static.tar.xz">ffmpeg-5.1.1-amd64-static.tar.xz</a>
<a href="ffmpeg-6.0-amd64-static.tar.xz">ffmpeg-6.0-amd64-static.tar.xz</a>
</pre></body></html>
"""

RELEASE_URL = f"{BASE_URL}/releases/ffmpeg-release-amd64-static.tar.xz"


def make_provider(tool_cache, **overrides) -> JohnVanSickleProvider:
    values = {"version": "release", "architecture": "x64"}
    values.update(overrides)
    return JohnVanSickleProvider(InstallOptions(**values), tool_cache=tool_cache)


class TestLatestRelease:
    @responses.activate
    def test_latest_release(self, tool_cache):
        responses.add(responses.GET, f"{BASE_URL}/release-readme.txt", body=RELEASE_README)

        release = make_provider(tool_cache).get_latest_release()

        assert release == ReleaseInfo(
            version="6.0.0",
            download_urls=(RELEASE_URL,),
            checksum_urls=(f"{RELEASE_URL}.md5",),
        )

    @responses.activate
    @pytest.mark.parametrize(
        "architecture,label", [("arm64", "arm64"), ("arm", "armhf"), ("ia32", "i686")]
    )
    def test_architecture_labels(self, tool_cache, architecture, label):
        responses.add(responses.GET, f"{BASE_URL}/release-readme.txt", body=RELEASE_README)

        release = make_provider(tool_cache, architecture=architecture).get_latest_release()

        assert release.download_urls == (
            f"{BASE_URL}/releases/ffmpeg-release-{label}-static.tar.xz",
        )

    @responses.activate
    def test_git_build(self, tool_cache):
        responses.add(responses.GET, f"{BASE_URL}/git-readme.txt", body=GIT_README)

        release = make_provider(tool_cache, version="GIT").get_latest_release()

        assert release.version == "0.0.0-git.20240301"
        assert release.is_git_release
        assert release.download_urls == (
            f"{BASE_URL}/builds/ffmpeg-git-amd64-static.tar.xz",
        )

    @responses.activate
    def test_unparseable_readme(self, tool_cache):
        responses.add(responses.GET, f"{BASE_URL}/release-readme.txt", body="nothing here")

        with pytest.raises(ProviderError, match="release version"):
            make_provider(tool_cache).get_latest_release()

    def test_unsupported_architecture(self, tool_cache):
        with pytest.raises(UnsupportedBuildError, match="ppc64"):
            make_provider(tool_cache, architecture="ppc64").get_latest_release()

    def test_shared_linking_unsupported(self, tool_cache):
        with pytest.raises(UnsupportedBuildError, match="shared"):
            make_provider(tool_cache, linking_type="shared").get_latest_release()


class TestAvailableReleases:
    @responses.activate
    def test_lists_current_and_old_releases(self, tool_cache):
        responses.add(responses.GET, f"{BASE_URL}/release-readme.txt", body=RELEASE_README)
        responses.add(responses.GET, f"{BASE_URL}/old-releases/", body=OLD_RELEASES)

        releases = make_provider(tool_cache).get_available_releases()

        assert [r.version for r in releases] == ["6.0.0", "4.2.2", "5.1.1"]
        assert releases[1].download_urls == (
            f"{BASE_URL}/old-releases/ffmpeg-4.2.2-amd64-static.tar.xz",
        )
        assert releases[1].checksum_urls == ()

    @responses.activate
    def test_filters_by_architecture(self, tool_cache):
        responses.add(responses.GET, f"{BASE_URL}/release-readme.txt", body=RELEASE_README)
        responses.add(responses.GET, f"{BASE_URL}/old-releases/", body=OLD_RELEASES)

        releases = make_provider(tool_cache, architecture="x86").get_available_releases()

        assert [r.version for r in releases] == ["6.0.0", "4.4.1"]


class TestDownloadTool:
    """Test installing a release into the tool cache."""

    @responses.activate
    def test_download_verify_and_cache(self, tool_cache, ffmpeg_tar_xz):
        responses.add(responses.GET, RELEASE_URL, body=ffmpeg_tar_xz)
        responses.add(
            responses.GET, f"{RELEASE_URL}.md5", body=hashlib.md5(ffmpeg_tar_xz).hexdigest()
        )
        release = ReleaseInfo("6.0.0", (RELEASE_URL,), checksum_urls=(f"{RELEASE_URL}.md5",))

        installed = make_provider(tool_cache).download_tool(release)

        assert installed.version == "6.0.0"
        assert installed.path == tool_cache.root / "ffmpeg" / "6.0.0" / "x64"
        assert (installed.path / "ffmpeg").read_text() == "ffmpeg-binary"
        assert (installed.path / "ffprobe").exists()
        assert tool_cache.find("ffmpeg", "6.0.0", "x64") is not None

    @responses.activate
    def test_skip_integrity_check(self, tool_cache, ffmpeg_tar_xz):
        # No checksum response registered: fetching it would fail
        responses.add(responses.GET, RELEASE_URL, body=ffmpeg_tar_xz)
        release = ReleaseInfo("6.0.0", (RELEASE_URL,), checksum_urls=(f"{RELEASE_URL}.md5",))

        provider = make_provider(tool_cache, skip_integrity_check=True)
        installed = provider.download_tool(release)

        assert (installed.path / "ffmpeg").exists()
        assert len(responses.calls) == 1

    @responses.activate
    def test_custom_cache_key(self, tool_cache, ffmpeg_tar_xz):
        responses.add(responses.GET, RELEASE_URL, body=ffmpeg_tar_xz)

        provider = make_provider(tool_cache, tool_cache_dir="ffmpeg-static")
        installed = provider.download_tool(ReleaseInfo("6.0.0", (RELEASE_URL,)))

        assert installed.path == tool_cache.root / "ffmpeg-static" / "6.0.0" / "x64"

    @responses.activate
    def test_archive_without_ffmpeg(self, tool_cache):
        responses.add(responses.GET, RELEASE_URL, body=make_tar_xz({"readme.txt": "x"}))

        with pytest.raises(ProviderError, match="No ffmpeg executable"):
            make_provider(tool_cache).download_tool(ReleaseInfo("6.0.0", (RELEASE_URL,)))

        assert tool_cache.find_all_versions("ffmpeg", "x64") == []

    def test_release_without_urls(self, tool_cache):
        with pytest.raises(ProviderError, match="no download URLs"):
            make_provider(tool_cache).download_tool(ReleaseInfo("6.0.0", ()))
