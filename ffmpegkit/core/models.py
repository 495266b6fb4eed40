"""
Data records shared by the install core, the providers and the tool cache.

All records are frozen: a request is immutable for the duration of one
install call and releases are never mutated after a provider creates them.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class InstallOptions:
    """
    Options for a single install call.

    Attributes:
        version: Semver range (e.g. '5.1.2', '^4.0.0') or one of the
            case-insensitive sentinels 'git' / 'release'
        architecture: Target architecture ('x64', 'arm64', ...)
        tool_cache_dir: Cache directory key (tool name in the tool cache)
        skip_integrity_check: Skip checksum verification of downloads
        linking_type: 'static' or 'shared', interpreted by providers only
        github_token: Optional token for GitHub API requests
    """

    version: str
    architecture: str
    tool_cache_dir: str = "ffmpeg"
    skip_integrity_check: bool = False
    linking_type: str = "static"
    github_token: Optional[str] = None

    def __repr__(self) -> str:
        token = "***" if self.github_token else None
        return (
            f"InstallOptions(version={self.version!r}, "
            f"architecture={self.architecture!r}, "
            f"tool_cache_dir={self.tool_cache_dir!r}, "
            f"skip_integrity_check={self.skip_integrity_check!r}, "
            f"linking_type={self.linking_type!r}, github_token={token!r})"
        )


@dataclass(frozen=True)
class ReleaseInfo:
    """One downloadable ffmpeg build."""

    version: str
    """Concrete semantic version"""

    download_urls: Tuple[str, ...]
    """Archive URLs, tried in order"""

    is_git_release: bool = False
    """Whether this is a nightly/git build rather than a tagged release"""

    checksum_urls: Tuple[str, ...] = ()
    """Checksum file URLs; checksum_urls[i] verifies download_urls[i]"""


@dataclass(frozen=True)
class InstalledTool:
    """A tool installed in the tool cache."""

    version: str
    path: Path


@dataclass(frozen=True)
class InstallResult:
    """Outcome of an install call."""

    version: str
    path: Path
    cache_hit: bool


__all__ = ["InstallOptions", "ReleaseInfo", "InstalledTool", "InstallResult"]
