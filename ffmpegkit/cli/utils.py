"""
Shared utilities for CLI commands.

Provides error printing and the GitHub Actions runner file commands
($GITHUB_OUTPUT, $GITHUB_PATH) used when running inside a workflow.
"""

import logging
import os
import sys
import uuid
from pathlib import Path
from typing import Mapping, Optional

logger = logging.getLogger(__name__)


# ============================================================================
# Output
# ============================================================================


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


# ============================================================================
# GitHub Actions File Commands
# ============================================================================


def _file_command(name: str, environ: Optional[Mapping[str, str]]) -> Optional[Path]:
    environ = os.environ if environ is None else environ
    value = environ.get(name)
    return Path(value) if value else None


def set_output(
    name: str, value: str, environ: Optional[Mapping[str, str]] = None
) -> bool:
    """
    Write a step output to $GITHUB_OUTPUT.

    Values are written with a random heredoc delimiter so that they may
    contain newlines.

    Returns:
        True if the output was written, False when not running in a workflow
    """
    output_file = _file_command("GITHUB_OUTPUT", environ)
    if output_file is None:
        return False

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        raise ValueError("Output name or value contains the delimiter")

    with open(output_file, "a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    logger.debug(f"Set output {name}")
    return True


def add_path(path: Path, environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Prepend a directory to PATH for the following workflow steps.

    Returns:
        True if $GITHUB_PATH was updated, False when not running in a workflow
    """
    path_file = _file_command("GITHUB_PATH", environ)
    if path_file is None:
        return False

    with open(path_file, "a", encoding="utf-8") as f:
        f.write(f"{path}\n")
    logger.debug(f"Added {path} to PATH")
    return True
