"""
Install orchestrator: select a provider, resolve a version, consult the tool
cache and download on a miss.

Usage:
    from ffmpegkit.core.models import InstallOptions
    from ffmpegkit.dists.installer import install

    result = install(InstallOptions(version="^6.0.0", architecture="x64"))
    print(result.path, result.cache_hit)

Only the two network-bound resolution steps are retried: fetching the latest
release for a 'git'/'release' request and listing+resolving for a range.
Downloads are not retried here; the downloader already falls back across
mirrors.
"""

import logging
import time
from typing import Callable, Optional

from ffmpegkit.core.exceptions import UnsupportedBuildError, VersionNotAvailableError
from ffmpegkit.core.interfaces import ReleaseProvider
from ffmpegkit.core.models import InstallOptions, InstallResult, ReleaseInfo
from ffmpegkit.core.platform import current_platform
from ffmpegkit.core.retry import CancellationToken, RetryPolicy, with_retry
from ffmpegkit.core.tool_cache import ToolCache
from ffmpegkit.dists.providers import select_provider
from ffmpegkit.dists.resolver import resolve_release

logger = logging.getLogger(__name__)

#: Version requests meaning "whatever the provider currently ships"
SENTINEL_VERSIONS = ("git", "release")


def is_latest_sentinel(version: str) -> bool:
    return version.lower() in SENTINEL_VERSIONS


class FFmpegInstaller:
    """
    Runs one install request to completion.

    Example:
        >>> installer = FFmpegInstaller(
        ...     InstallOptions(version="release", architecture="x64"),
        ...     retry_policy=RetryPolicy(max_attempts=3),
        ...     cancellation=CancellationToken.with_timeout(600),
        ... )
        >>> result = installer.install()
    """

    def __init__(
        self,
        options: InstallOptions,
        *,
        platform: Optional[str] = None,
        tool_cache: Optional[ToolCache] = None,
        provider: Optional[ReleaseProvider] = None,
        retry_policy: Optional[RetryPolicy] = None,
        cancellation: Optional[CancellationToken] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            options: What to install
            platform: Platform identifier (default: the running system)
            tool_cache: Tool cache to look up and install into
            provider: Use this provider instead of selecting one by platform
            retry_policy: Retry parameters for the resolution steps
            cancellation: Token checked before every attempt and backoff wait
            sleep: Sleep function used for backoff when no token is given
        """
        self.options = options
        self.platform = platform or current_platform()
        self.tool_cache = tool_cache or ToolCache()
        self._provider = provider
        self.retry_policy = retry_policy or RetryPolicy()
        self.cancellation = cancellation
        self._sleep = sleep

    @property
    def provider(self) -> ReleaseProvider:
        if self._provider is None:
            self._provider = select_provider(self.platform, self.options, self.tool_cache)
        return self._provider

    def _retry(self, operation, fatal=()):
        return with_retry(
            operation,
            fatal=fatal,
            cancellation=self.cancellation,
            sleep=self._sleep,
            **self.retry_policy.as_kwargs(),
        )

    def _resolve(self, provider: ReleaseProvider) -> ReleaseInfo:
        return self._retry(
            lambda: resolve_release(self.options.version, provider.get_available_releases()),
            fatal=(VersionNotAvailableError, UnsupportedBuildError),
        )

    def install(self) -> InstallResult:
        """
        Install the requested ffmpeg build, or reuse it from the tool cache.

        Returns:
            InstallResult with the concrete version, install path and whether
            the tool cache already held it. On a cache hit for a range the
            version is the cached one that satisfied it, not the range.

        Raises:
            UnsupportedPlatformError: No provider for the platform
            VersionNotAvailableError: No release satisfies the request
            RetryExhaustedError: A resolution step kept failing
            InstallCancelledError: The cancellation token fired
        """
        options = self.options
        provider = self.provider

        release: Optional[ReleaseInfo] = None
        version = options.version
        if is_latest_sentinel(options.version):
            release = self._retry(
                provider.get_latest_release, fatal=(UnsupportedBuildError,)
            )
            version = release.version
            logger.debug(f"Latest {options.version.lower()} build is {version}")

        cached = self.tool_cache.find(options.tool_cache_dir, version, options.architecture)
        if cached is not None:
            logger.info(f"Using ffmpeg version {cached.version} from tool cache")
            return InstallResult(version=cached.version, path=cached.path, cache_hit=True)

        if release is None:
            release = self._resolve(provider)

        logger.info(
            f"Installing ffmpeg version {release.version} from "
            f"{', '.join(release.download_urls)}"
        )
        installed = provider.download_tool(release)
        return InstallResult(version=installed.version, path=installed.path, cache_hit=False)


def install(options: InstallOptions, **kwargs) -> InstallResult:
    """
    Install ffmpeg as described by ``options``.

    Keyword arguments are passed to FFmpegInstaller.
    """
    return FFmpegInstaller(options, **kwargs).install()


__all__ = ["FFmpegInstaller", "install", "is_latest_sentinel", "SENTINEL_VERSIONS"]
