"""YAML configuration parser for ffmpegkit.

This module parses ffmpegkit.yaml, reads GitHub Actions inputs from the
environment and merges both into InstallOptions. Later sources win:
command-line flags > INPUT_* environment variables > file > defaults.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ffmpegkit.core.exceptions import ConfigError
from ffmpegkit.core.models import InstallOptions
from ffmpegkit.core.platform import detect_architecture
from ffmpegkit.core.retry import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "ffmpegkit.yaml"

VALID_ARCHITECTURES = ("x64", "x86", "ia32", "arm64", "arm")
VALID_LINKING_TYPES = ("static", "shared")

# action input name -> FFmpegConfig field
ACTION_INPUTS = {
    "ffmpeg-version": "version",
    "architecture": "architecture",
    "linking-type": "linking_type",
    "github-token": "github_token",
    "skip-integrity-check": "skip_integrity_check",
    "tool-cache-dir": "tool_cache_dir",
}

_TRUE_VALUES = ("true", "True", "TRUE")
_FALSE_VALUES = ("false", "False", "FALSE")


@dataclass
class FFmpegConfig:
    """What to install."""

    version: str = "release"  # semver range, 'release' or 'git'
    architecture: Optional[str] = None  # None: detect from the machine
    linking_type: str = "static"  # 'static', 'shared'
    skip_integrity_check: bool = False
    tool_cache_dir: str = "ffmpeg"
    github_token: Optional[str] = field(default=None, repr=False)


@dataclass
class RetryConfig:
    """Retry parameters for release resolution."""

    max_attempts: int = 5
    initial_delay_ms: int = 1000


@dataclass
class FFmpegKitConfig:
    """Complete ffmpegkit configuration."""

    version: int = 1
    ffmpeg: FFmpegConfig = field(default_factory=FFmpegConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    tool_cache_root: Optional[str] = None

    def install_options(self) -> InstallOptions:
        """Build the InstallOptions for this configuration."""
        ffmpeg = self.ffmpeg
        return InstallOptions(
            version=ffmpeg.version,
            architecture=ffmpeg.architecture or detect_architecture(),
            tool_cache_dir=ffmpeg.tool_cache_dir,
            skip_integrity_check=ffmpeg.skip_integrity_check,
            linking_type=ffmpeg.linking_type,
            github_token=ffmpeg.github_token,
        )

    def retry_policy(self) -> RetryPolicy:
        try:
            return RetryPolicy(
                max_attempts=self.retry.max_attempts,
                initial_delay_ms=self.retry.initial_delay_ms,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid retry configuration: {e}")


def parse_config(config_path: Path) -> FFmpegKitConfig:
    """
    Parse ffmpegkit.yaml configuration file.

    Args:
        config_path: Path to ffmpegkit.yaml

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    return _parse_and_validate(data)


def _parse_and_validate(data: dict) -> FFmpegKitConfig:
    """Parse and validate configuration data."""
    if "version" not in data:
        raise ConfigError("Missing required field: version")

    if data["version"] != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    tool_cache_root = data.get("tool_cache_root")
    if tool_cache_root is not None and not isinstance(tool_cache_root, str):
        raise ConfigError("tool_cache_root must be a string")

    return FFmpegKitConfig(
        version=data["version"],
        ffmpeg=_parse_ffmpeg_config(_section(data, "ffmpeg")),
        retry=_parse_retry_config(_section(data, "retry")),
        tool_cache_root=tool_cache_root,
    )


def _section(data: dict, name: str) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return section


def _parse_ffmpeg_config(data: dict) -> FFmpegConfig:
    """Parse the ffmpeg section."""
    unknown = set(data) - set(FFmpegConfig.__dataclass_fields__)
    if unknown:
        raise ConfigError(f"Unknown ffmpeg option(s): {', '.join(sorted(unknown))}")

    version = data.get("version", "release")
    if not isinstance(version, str):
        # YAML reads `version: 6.10` as the float 6.1
        raise ConfigError(
            f"ffmpeg.version must be a string, got {version!r}; "
            "quote it in the config file (e.g. version: \"6.10\")"
        )

    skip = data.get("skip_integrity_check", False)
    if not isinstance(skip, bool):
        raise ConfigError("skip_integrity_check must be true or false")

    return validate_ffmpeg_config(
        FFmpegConfig(
            version=version,
            architecture=data.get("architecture"),
            linking_type=data.get("linking_type", "static"),
            skip_integrity_check=skip,
            tool_cache_dir=data.get("tool_cache_dir", "ffmpeg"),
            github_token=data.get("github_token"),
        )
    )


def _parse_retry_config(data: dict) -> RetryConfig:
    """Parse the retry section."""
    config = RetryConfig(
        max_attempts=data.get("max_attempts", 5),
        initial_delay_ms=data.get("initial_delay_ms", 1000),
    )
    for name in ("max_attempts", "initial_delay_ms"):
        value = getattr(config, name)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError(f"retry.{name} must be an integer")
    if config.max_attempts < 1:
        raise ConfigError("retry.max_attempts must be at least 1")
    if config.initial_delay_ms < 0:
        raise ConfigError("retry.initial_delay_ms cannot be negative")
    return config


def validate_ffmpeg_config(config: FFmpegConfig) -> FFmpegConfig:
    """
    Check an ffmpeg section after all overrides were applied.

    Raises:
        ConfigError: On an empty version, unknown architecture or linking type
    """
    if not isinstance(config.version, str) or not config.version.strip():
        raise ConfigError("ffmpeg version must be a non-empty string")

    if config.architecture is not None and config.architecture not in VALID_ARCHITECTURES:
        raise ConfigError(
            f"Invalid architecture: {config.architecture} "
            f"(expected one of {list(VALID_ARCHITECTURES)})"
        )

    if config.linking_type not in VALID_LINKING_TYPES:
        raise ConfigError(
            f"Invalid linking type: {config.linking_type} "
            f"(expected one of {list(VALID_LINKING_TYPES)})"
        )

    if not isinstance(config.tool_cache_dir, str) or not config.tool_cache_dir.strip():
        raise ConfigError("tool_cache_dir must be a non-empty string")

    return config


def _parse_bool_input(name: str, value: str) -> bool:
    """Parse a boolean action input the way GitHub Actions does."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(
        f"Input does not meet YAML 1.2 \"Core Schema\" specification: {name}\n"
        f"Support boolean input list: `true | True | TRUE | false | False | FALSE`"
    )


def read_action_inputs(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Read GitHub Actions inputs from INPUT_* environment variables.

    Empty inputs are treated as unset.

    Args:
        environ: Environment mapping (default: os.environ)

    Returns:
        FFmpegConfig field name -> value, for every input that is set
    """
    environ = os.environ if environ is None else environ

    values: Dict[str, Any] = {}
    for input_name, field_name in ACTION_INPUTS.items():
        raw = environ.get(f"INPUT_{input_name.upper()}", "").strip()
        if not raw:
            continue
        if field_name == "skip_integrity_check":
            values[field_name] = _parse_bool_input(input_name, raw)
        else:
            values[field_name] = raw

    if values:
        logger.debug(f"Action inputs: {sorted(values)}")
    return values


def apply_overrides(config: FFmpegKitConfig, overrides: Dict[str, Any]) -> FFmpegKitConfig:
    """
    Return a copy of ``config`` with ffmpeg fields replaced by ``overrides``.

    None values are ignored, so unset command-line flags keep the
    configured value.
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    if not values:
        return config
    try:
        ffmpeg = replace(config.ffmpeg, **values)
    except TypeError as e:
        raise ConfigError(f"Unknown ffmpeg option: {e}")
    return replace(config, ffmpeg=validate_ffmpeg_config(ffmpeg))


def load_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> FFmpegKitConfig:
    """
    Load configuration from file and environment.

    An explicit ``config_path`` must exist. Without one, ./ffmpegkit.yaml is
    used when present and defaults otherwise.

    Args:
        config_path: Path to the configuration file
        environ: Environment mapping (default: os.environ)

    Returns:
        Configuration with action inputs applied

    Raises:
        ConfigError: If the file or an input is invalid
    """
    if config_path is not None:
        config = parse_config(config_path)
    elif Path(DEFAULT_CONFIG_FILE).exists():
        logger.debug(f"Using {DEFAULT_CONFIG_FILE}")
        config = parse_config(Path(DEFAULT_CONFIG_FILE))
    else:
        config = FFmpegKitConfig()

    return apply_overrides(config, read_action_inputs(environ))


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "FFmpegConfig",
    "RetryConfig",
    "FFmpegKitConfig",
    "ConfigError",
    "parse_config",
    "read_action_inputs",
    "apply_overrides",
    "validate_ffmpeg_config",
    "load_config",
]
