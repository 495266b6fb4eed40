"""Configuration module for ffmpegkit.

This module provides YAML configuration parsing for ffmpegkit.yaml and
reads GitHub Actions inputs from the environment.
"""

from ffmpegkit.config.parser import (
    FFmpegConfig,
    RetryConfig,
    FFmpegKitConfig,
    ConfigError,
    parse_config,
    read_action_inputs,
    apply_overrides,
    load_config,
)

__all__ = [
    "FFmpegConfig",
    "RetryConfig",
    "FFmpegKitConfig",
    "ConfigError",
    "parse_config",
    "read_action_inputs",
    "apply_overrides",
    "load_config",
]
