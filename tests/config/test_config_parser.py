"""
Unit tests for configuration parsing.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from ffmpegkit.config.parser import (
    ConfigError,
    FFmpegKitConfig,
    apply_overrides,
    load_config,
    parse_config,
    read_action_inputs,
)


@pytest.fixture
def write_config(temp_dir):
    def _write(content: str) -> Path:
        path = temp_dir / "ffmpegkit.yaml"
        path.write_text(content)
        return path

    return _write


class TestParseConfig:
    def test_full_config(self, write_config):
        path = write_config(
            """version: 1
ffmpeg:
  version: "^6.0.0"
  architecture: arm64
  linking_type: shared
  skip_integrity_check: true
  tool_cache_dir: ffmpeg-shared
retry:
  max_attempts: 3
  initial_delay_ms: 250
tool_cache_root: /opt/hostedtoolcache
"""
        )

        config = parse_config(path)

        assert config.ffmpeg.version == "^6.0.0"
        assert config.ffmpeg.architecture == "arm64"
        assert config.ffmpeg.linking_type == "shared"
        assert config.ffmpeg.skip_integrity_check is True
        assert config.ffmpeg.tool_cache_dir == "ffmpeg-shared"
        assert config.retry.max_attempts == 3
        assert config.retry.initial_delay_ms == 250
        assert config.tool_cache_root == "/opt/hostedtoolcache"

    def test_defaults(self, write_config):
        config = parse_config(write_config("version: 1\n"))

        assert config.ffmpeg.version == "release"
        assert config.ffmpeg.architecture is None
        assert config.ffmpeg.linking_type == "static"
        assert config.retry.max_attempts == 5
        assert config.tool_cache_root is None

    @pytest.mark.parametrize("value", ["6.10", "6.0", "6"])
    def test_unquoted_numeric_version_rejected(self, write_config, value):
        path = write_config(f"version: 1\nffmpeg:\n  version: {value}\n")

        with pytest.raises(ConfigError, match="must be a string.*quote it"):
            parse_config(path)

    def test_quoted_version_kept_verbatim(self, write_config):
        config = parse_config(write_config('version: 1\nffmpeg:\n  version: "6.10"\n'))
        assert config.ffmpeg.version == "6.10"

    @pytest.mark.parametrize(
        "content,message",
        [
            ("", "empty"),
            ("ffmpeg: {}\n", "Missing required field: version"),
            ("version: 2\n", "Unsupported version"),
            ("version: 1\nffmpeg: [1]\n", "must be a mapping"),
            ("version: 1\nffmpeg:\n  linking_type: dynamic\n", "Invalid linking type"),
            ("version: 1\nffmpeg:\n  architecture: mips\n", "Invalid architecture"),
            ("version: 1\nffmpeg:\n  flavour: full\n", "Unknown ffmpeg option"),
            ("version: 1\nffmpeg:\n  skip_integrity_check: maybe\n", "true or false"),
            ("version: 1\nretry:\n  max_attempts: 0\n", "at least 1"),
            ("version: 1\nretry:\n  initial_delay_ms: fast\n", "must be an integer"),
            ("version: 1\nffmpeg: {version: [\n", "Invalid YAML"),
        ],
    )
    def test_invalid(self, write_config, content, message):
        with pytest.raises(ConfigError, match=message):
            parse_config(write_config(content))

    def test_missing_file(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            parse_config(temp_dir / "missing.yaml")


class TestActionInputs:
    def test_reads_inputs(self):
        environ = {
            "INPUT_FFMPEG-VERSION": "git",
            "INPUT_ARCHITECTURE": "x64",
            "INPUT_LINKING-TYPE": "shared",
            "INPUT_GITHUB-TOKEN": "token",
            "INPUT_SKIP-INTEGRITY-CHECK": "TRUE",
            "INPUT_TOOL-CACHE-DIR": "ffmpeg-git",
        }

        assert read_action_inputs(environ) == {
            "version": "git",
            "architecture": "x64",
            "linking_type": "shared",
            "github_token": "token",
            "skip_integrity_check": True,
            "tool_cache_dir": "ffmpeg-git",
        }

    def test_empty_inputs_are_unset(self):
        assert read_action_inputs({"INPUT_FFMPEG-VERSION": "  ", "INPUT_ARCHITECTURE": ""}) == {}

    def test_invalid_boolean(self):
        with pytest.raises(ConfigError, match="skip-integrity-check"):
            read_action_inputs({"INPUT_SKIP-INTEGRITY-CHECK": "yes"})

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("INPUT_FFMPEG-VERSION", "5.1.2")
        assert read_action_inputs() == {"version": "5.1.2"}


class TestLoadConfig:
    def test_inputs_override_file(self, write_config):
        path = write_config("version: 1\nffmpeg:\n  version: '5.1.2'\n  linking_type: shared\n")

        config = load_config(path, environ={"INPUT_FFMPEG-VERSION": "release"})

        assert config.ffmpeg.version == "release"
        assert config.ffmpeg.linking_type == "shared"

    def test_defaults_without_file(self, temp_dir, monkeypatch):
        monkeypatch.chdir(temp_dir)
        assert load_config(environ={}) == FFmpegKitConfig()

    def test_default_file_in_working_directory(self, write_config, temp_dir, monkeypatch):
        write_config("version: 1\nffmpeg:\n  version: '4.4.1'\n")
        monkeypatch.chdir(temp_dir)

        assert load_config(environ={}).ffmpeg.version == "4.4.1"

    def test_explicit_missing_file(self, temp_dir):
        with pytest.raises(ConfigError):
            load_config(temp_dir / "nope.yaml", environ={})


class TestOverrides:
    def test_none_values_are_ignored(self):
        config = apply_overrides(FFmpegKitConfig(), {"version": None, "architecture": "x64"})

        assert config.ffmpeg.version == "release"
        assert config.ffmpeg.architecture == "x64"

    def test_overrides_are_validated(self):
        with pytest.raises(ConfigError, match="Invalid linking type"):
            apply_overrides(FFmpegKitConfig(), {"linking_type": "dynamic"})

    def test_original_is_unchanged(self):
        original = FFmpegKitConfig()
        apply_overrides(original, {"version": "git"})
        assert original.ffmpeg.version == "release"


class TestInstallOptions:
    def test_detects_architecture(self):
        with patch("ffmpegkit.config.parser.detect_architecture", return_value="arm64"):
            options = FFmpegKitConfig().install_options()

        assert options.architecture == "arm64"
        assert options.version == "release"
        assert options.tool_cache_dir == "ffmpeg"

    def test_token_is_masked_in_repr(self):
        config = apply_overrides(
            FFmpegKitConfig(), {"github_token": "secret", "architecture": "x64"}
        )

        assert "secret" not in repr(config.install_options())
        assert "secret" not in repr(config)
