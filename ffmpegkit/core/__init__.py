"""
Core functionality for ffmpegkit.

This package contains the foundational modules that the providers and the
install orchestrator depend on.
"""

from .exceptions import (
    FFmpegKitError,
    ConfigError,
    UnsupportedPlatformError,
    ProviderError,
    UnsupportedBuildError,
    VersionNotAvailableError,
    InvalidVersionConstraintError,
    RetryExhaustedError,
    InstallCancelledError,
    ToolCacheError,
    ToolCacheLockTimeout,
)

from .models import (
    InstallOptions,
    ReleaseInfo,
    InstalledTool,
    InstallResult,
)

from .platform import (
    PlatformInfo,
    detect_platform,
    current_platform,
    normalize_platform,
)

from .retry import (
    RetryPolicy,
    CancellationToken,
    with_retry,
)

from .tool_cache import ToolCache

from .interfaces import ReleaseProvider

__all__ = [
    # Exceptions
    "FFmpegKitError",
    "ConfigError",
    "UnsupportedPlatformError",
    "ProviderError",
    "UnsupportedBuildError",
    "VersionNotAvailableError",
    "InvalidVersionConstraintError",
    "RetryExhaustedError",
    "InstallCancelledError",
    "ToolCacheError",
    "ToolCacheLockTimeout",
    # Models
    "InstallOptions",
    "ReleaseInfo",
    "InstalledTool",
    "InstallResult",
    # Platform
    "PlatformInfo",
    "detect_platform",
    "current_platform",
    "normalize_platform",
    # Retry
    "RetryPolicy",
    "CancellationToken",
    "with_retry",
    # Tool cache
    "ToolCache",
    # Interfaces
    "ReleaseProvider",
]
