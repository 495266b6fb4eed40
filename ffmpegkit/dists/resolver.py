"""
Version resolution: pick one release for a semver range.
"""

import logging
from typing import Sequence

from ffmpegkit.core.exceptions import VersionNotAvailableError
from ffmpegkit.core.models import ReleaseInfo
from ffmpegkit.core.versions import highest_version, max_satisfying

logger = logging.getLogger(__name__)


def resolve_release(constraint: str, releases: Sequence[ReleaseInfo]) -> ReleaseInfo:
    """
    Select the release with the highest version satisfying ``constraint``.

    When several releases share that version, the first one in
    ``releases`` wins.

    Args:
        constraint: npm-style semver range (e.g. '5.1.2', '^4.0.0')
        releases: Releases in provider order

    Returns:
        The selected release

    Raises:
        InvalidVersionConstraintError: If the constraint is not a valid range
        VersionNotAvailableError: If no release satisfies the constraint

    Example:
        >>> releases = [ReleaseInfo("3.9.0", ("a",)), ReleaseInfo("4.2.0", ("b",))]
        >>> resolve_release("^4.0.0", releases).version
        '4.2.0'
    """
    versions = [release.version for release in releases]
    selected = max_satisfying(versions, constraint)

    if selected is None:
        raise VersionNotAvailableError(constraint, highest=highest_version(versions))

    release = next(r for r in releases if r.version == selected)
    logger.debug(f"Resolved {constraint} to {release.version}")
    return release


__all__ = ["resolve_release"]
