"""
Centralized exception hierarchy for ffmpegkit.

This module defines the exceptions raised by the install core so callers
can tell fatal resolution errors apart from exhausted retries.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class FFmpegKitError(Exception):
    """Base exception for all ffmpegkit errors."""

    pass


class ConfigError(FFmpegKitError):
    """Configuration parsing or validation error."""

    pass


# ============================================================================
# Platform and Provider Exceptions
# ============================================================================


class UnsupportedPlatformError(FFmpegKitError):
    """Raised when no release provider exists for the running platform."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(
            f"Unsupported platform: {platform} (supported: windows, linux, macos)"
        )


class ProviderError(FFmpegKitError):
    """Raised when a release provider cannot serve the requested build."""

    pass


class UnsupportedBuildError(ProviderError):
    """Raised when a provider has no build for the requested architecture or linking."""

    pass


# ============================================================================
# Version Resolution Exceptions
# ============================================================================


class VersionNotAvailableError(FFmpegKitError):
    """Raised when no available release satisfies the requested constraint."""

    def __init__(self, constraint: str, highest: Optional[str] = None):
        self.constraint = constraint
        self.highest = highest
        msg = f"Requested version {constraint} is not available"
        if highest:
            msg += f" (highest available: {highest})"
        super().__init__(msg)


class InvalidVersionConstraintError(VersionNotAvailableError):
    """Raised when a version constraint is not a valid semver range."""

    def __init__(self, constraint: str):
        self.constraint = constraint
        self.highest = None
        FFmpegKitError.__init__(self, f"Invalid version constraint: {constraint!r}")


# ============================================================================
# Retry Exceptions
# ============================================================================


class RetryExhaustedError(FFmpegKitError):
    """Raised when a wrapped operation failed on every allowed attempt."""

    def __init__(self, attempts: int, last_error: BaseException):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"Failed after {attempts} attempts: {last_error}")


class InstallCancelledError(FFmpegKitError):
    """Raised when an install is cancelled or its deadline expires."""

    pass


# ============================================================================
# Tool Cache Exceptions
# ============================================================================


class ToolCacheError(FFmpegKitError):
    """Raised when the tool cache cannot be read or written."""

    pass


class ToolCacheLockTimeout(ToolCacheError):
    """Raised when a cache entry lock cannot be acquired within timeout."""

    pass
