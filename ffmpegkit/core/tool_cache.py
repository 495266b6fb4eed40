"""
On-disk tool cache for installed ffmpeg builds.

The layout matches the GitHub Actions hosted tool cache, so builds cached by
other setup actions (and by earlier runs on self-hosted runners) are found:

    <root>/<tool>/<version>/<arch>/          installed files
    <root>/<tool>/<version>/<arch>.complete  marker written last

An entry is only visible once its marker exists, so readers need no lock.
Writers of the same entry are serialized with a file lock.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import List, Optional

from filelock import FileLock, Timeout

from ffmpegkit.core.exceptions import (
    InvalidVersionConstraintError,
    ToolCacheError,
    ToolCacheLockTimeout,
)
from ffmpegkit.core.filesystem import FilesystemError, safe_rmtree
from ffmpegkit.core.models import InstalledTool
from ffmpegkit.core.versions import is_explicit_version, max_satisfying

logger = logging.getLogger(__name__)

TOOL_CACHE_ENV = "RUNNER_TOOL_CACHE"


def get_default_tool_cache_root() -> Path:
    """
    Get the tool cache root directory.

    Returns:
        $RUNNER_TOOL_CACHE when set (GitHub Actions runners), otherwise
        ~/.ffmpegkit/tool-cache
    """
    env_root = os.environ.get(TOOL_CACHE_ENV)
    if env_root:
        return Path(env_root)
    return Path.home() / ".ffmpegkit" / "tool-cache"


class ToolCache:
    """
    Versioned, per-architecture store of installed tools.

    Example:
        >>> cache = ToolCache()
        >>> cached = cache.find("ffmpeg", "6.0.0", "x64")
        >>> if cached:
        ...     print(cached.path)
    """

    def __init__(self, root: Optional[Path] = None, lock_timeout: int = 300):
        """
        Args:
            root: Cache root (default: see get_default_tool_cache_root)
            lock_timeout: Seconds to wait for an entry lock
        """
        self.root = Path(root) if root is not None else get_default_tool_cache_root()
        self.lock_timeout = lock_timeout
        logger.debug(f"Using tool cache at {self.root}")

    def _entry_dir(self, tool_name: str, version: str, arch: str) -> Path:
        return self.root / tool_name / version / arch

    def _marker(self, tool_name: str, version: str, arch: str) -> Path:
        return self.root / tool_name / version / f"{arch}.complete"

    def _lock(self, tool_name: str, version: str, arch: str) -> FileLock:
        lock_dir = self.root / ".locks"
        lock_dir.mkdir(parents=True, exist_ok=True)
        return FileLock(
            str(lock_dir / f"{tool_name}-{version}-{arch}.lock"),
            timeout=self.lock_timeout,
        )

    def is_cached(self, tool_name: str, version: str, arch: str) -> bool:
        return (
            self._marker(tool_name, version, arch).exists()
            and self._entry_dir(tool_name, version, arch).is_dir()
        )

    def find_all_versions(self, tool_name: str, arch: str) -> List[str]:
        """List the versions of a tool that are fully cached for ``arch``."""
        tool_dir = self.root / tool_name
        if not tool_dir.is_dir():
            return []
        return sorted(
            child.name
            for child in tool_dir.iterdir()
            if child.is_dir() and self.is_cached(tool_name, child.name, arch)
        )

    def find(
        self, tool_name: str, version_spec: str, arch: str
    ) -> Optional[InstalledTool]:
        """
        Look up a cached tool.

        An explicit version looks up exactly that entry. A range picks the
        highest cached version satisfying it.

        Args:
            tool_name: Cache directory key
            version_spec: Explicit version or npm-style range
            arch: Architecture

        Returns:
            InstalledTool if cached, None otherwise
        """
        if not tool_name or not version_spec or not arch:
            return None

        version: Optional[str] = version_spec
        if not is_explicit_version(version_spec):
            try:
                version = max_satisfying(
                    self.find_all_versions(tool_name, arch), version_spec
                )
            except InvalidVersionConstraintError:
                # Not a range either (e.g. a sentinel); nothing can match
                version = None
            if version is None:
                logger.debug(f"No cached {tool_name} matches {version_spec} ({arch})")
                return None

        if not self.is_cached(tool_name, version, arch):
            logger.debug(f"{tool_name} {version} ({arch}) is not cached")
            return None

        return InstalledTool(
            version=version, path=self._entry_dir(tool_name, version, arch)
        )

    def cache_dir(
        self, source_dir: Path, tool_name: str, version: str, arch: str
    ) -> Path:
        """
        Copy a directory into the cache and mark the entry complete.

        Args:
            source_dir: Directory with the tool's files
            tool_name: Cache directory key
            version: Concrete version
            arch: Architecture

        Returns:
            Path of the cached entry

        Raises:
            ToolCacheLockTimeout: If the entry lock cannot be acquired
            ToolCacheError: If copying fails
        """
        source_dir = Path(source_dir)
        if not source_dir.is_dir():
            raise ToolCacheError(f"Source is not a directory: {source_dir}")

        entry = self._entry_dir(tool_name, version, arch)
        marker = self._marker(tool_name, version, arch)

        try:
            with self._lock(tool_name, version, arch):
                if self.is_cached(tool_name, version, arch):
                    logger.info(f"{tool_name} {version} ({arch}) cached by another process")
                    return entry

                marker.unlink(missing_ok=True)
                if entry.exists():
                    safe_rmtree(entry, require_prefix=self.root)

                logger.debug(f"Caching {source_dir} as {entry}")
                shutil.copytree(source_dir, entry)
                marker.write_text("")
        except Timeout as e:
            raise ToolCacheLockTimeout(
                f"Timed out waiting for cache lock on {tool_name} {version} ({arch})"
            ) from e
        except (OSError, FilesystemError) as e:
            raise ToolCacheError(f"Failed to cache {tool_name} {version}: {e}") from e

        return entry

    def remove(self, tool_name: str, version: str, arch: str) -> bool:
        """
        Remove a cached entry.

        Returns:
            True if an entry was removed
        """
        entry = self._entry_dir(tool_name, version, arch)
        marker = self._marker(tool_name, version, arch)
        if not entry.exists() and not marker.exists():
            return False

        with self._lock(tool_name, version, arch):
            marker.unlink(missing_ok=True)
            safe_rmtree(entry, require_prefix=self.root)
        return True


__all__ = ["ToolCache", "get_default_tool_cache_root", "TOOL_CACHE_ENV"]
