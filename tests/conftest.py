"""
Pytest configuration and shared fixtures for ffmpegkit tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from ffmpegkit.core.models import InstallOptions
from ffmpegkit.core.platform import clear_platform_cache
from ffmpegkit.core.tool_cache import ToolCache

from tests.helpers import make_tar_xz

ACTION_ENV_VARS = (
    "INPUT_FFMPEG-VERSION",
    "INPUT_ARCHITECTURE",
    "INPUT_LINKING-TYPE",
    "INPUT_GITHUB-TOKEN",
    "INPUT_SKIP-INTEGRITY-CHECK",
    "INPUT_TOOL-CACHE-DIR",
    "GITHUB_OUTPUT",
    "GITHUB_PATH",
    "RUNNER_TOOL_CACHE",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep runner variables of the machine running the tests out of every test."""
    for name in ACTION_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    clear_platform_cache()
    yield
    clear_platform_cache()


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def tool_cache(temp_dir: Path) -> ToolCache:
    """Empty tool cache rooted in a temporary directory."""
    return ToolCache(root=temp_dir / "tool-cache", lock_timeout=5)


@pytest.fixture
def cached_ffmpeg(tool_cache: ToolCache, temp_dir: Path):
    """Factory that places a fake ffmpeg build into the tool cache."""

    def _cache(version: str, arch: str = "x64", tool: str = "ffmpeg") -> Path:
        source = temp_dir / f"src-{tool}-{version}-{arch}"
        source.mkdir()
        (source / "ffmpeg").write_text("#!/bin/sh\n")
        return tool_cache.cache_dir(source, tool, version, arch)

    return _cache


@pytest.fixture
def linux_options() -> InstallOptions:
    return InstallOptions(version="5.1.2", architecture="x64")


@pytest.fixture
def ffmpeg_tar_xz() -> bytes:
    """A johnvansickle-style static build archive."""
    return make_tar_xz(
        {"ffmpeg": "ffmpeg-binary", "ffprobe": "ffprobe-binary", "readme.txt": "hi"},
        top_dir="ffmpeg-6.0-amd64-static",
    )
