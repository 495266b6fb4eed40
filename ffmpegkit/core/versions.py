"""
Semantic version helpers.

Version constraints follow npm range syntax ('5.1.2', '^4.0.0', '~5.1',
'>=4 <6', '4.x', '*'), which is what CI workflow authors already write for
other setup actions. Parsing and matching are delegated to semantic_version.
"""

import logging
import re
from typing import Iterable, List, Optional

from semantic_version import NpmSpec, Version

from ffmpegkit.core.exceptions import InvalidVersionConstraintError

logger = logging.getLogger(__name__)

_LOOSE_VERSION = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?$")


def parse_version(version: str) -> Optional[Version]:
    """
    Parse a concrete semantic version.

    Returns:
        Version instance, or None if the string is not valid semver
    """
    try:
        return Version(version)
    except ValueError:
        return None


def is_explicit_version(version: str) -> bool:
    """Check whether a string names exactly one version rather than a range."""
    return parse_version(version) is not None


def coerce_version(version: str) -> str:
    """
    Normalize a provider version string into full semver.

    Example:
        >>> coerce_version("6.0")
        '6.0.0'
        >>> coerce_version("v5.1.2")
        '5.1.2'
    """
    match = _LOOSE_VERSION.match(version.strip())
    if not match:
        raise ValueError(f"Not a release version: {version!r}")
    major, minor, patch = (int(part or 0) for part in match.groups())
    return str(Version(major=major, minor=minor, patch=patch))


def parse_constraint(constraint: str) -> NpmSpec:
    """
    Parse an npm-style version range.

    Raises:
        InvalidVersionConstraintError: If the range is malformed
    """
    if not constraint or not constraint.strip():
        raise InvalidVersionConstraintError(constraint)
    try:
        return NpmSpec(constraint.strip())
    except ValueError as e:
        raise InvalidVersionConstraintError(constraint) from e


def max_satisfying(versions: Iterable[str], constraint: str) -> Optional[str]:
    """
    Find the highest version satisfying a range.

    Versions that are not valid semver are ignored.

    Args:
        versions: Candidate version strings
        constraint: npm-style range

    Returns:
        The matching version string as given, or None if nothing matches

    Raises:
        InvalidVersionConstraintError: If the range is malformed
    """
    spec = parse_constraint(constraint)

    best: Optional[Version] = None
    best_str: Optional[str] = None
    for candidate in versions:
        parsed = parse_version(candidate)
        if parsed is None:
            logger.debug(f"Ignoring non-semver version: {candidate}")
            continue
        if spec.match(parsed) and (best is None or parsed > best):
            best, best_str = parsed, candidate

    return best_str


def highest_version(versions: Iterable[str]) -> Optional[str]:
    """Return the highest valid semver string, or None."""
    parsed = [(v, parse_version(v)) for v in versions]
    valid = [(v, p) for v, p in parsed if p is not None]
    if not valid:
        return None
    return max(valid, key=lambda item: item[1])[0]


def sort_versions(versions: Iterable[str], reverse: bool = True) -> List[str]:
    """Sort valid semver strings, newest first by default."""
    valid = [v for v in versions if parse_version(v) is not None]
    return sorted(valid, key=Version, reverse=reverse)


__all__ = [
    "parse_version",
    "is_explicit_version",
    "coerce_version",
    "parse_constraint",
    "max_satisfying",
    "highest_version",
    "sort_versions",
]
