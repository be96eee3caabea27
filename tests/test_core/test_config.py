"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from codeharvest.core.config import Config, ContextConfig, ExtractorConfig
from codeharvest.core.exceptions import ConfigurationError


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "codeharvest.yaml"
    path.write_text(text)
    return path


def test_defaults() -> None:
    extractor = ExtractorConfig()
    assert extractor.marker == "FILE:"
    assert extractor.fallback_threshold == 50
    assert extractor.fallback_path == "generated-code.txt"
    assert ContextConfig().max_files == 50


def test_load_from_yaml(tmp_path: Path) -> None:
    path = _write(tmp_path, "extractor:\n  fallback_threshold: 10\ncontext:\n  max_files: 5\n  excluded_dirs: [out]\n")
    config = Config(config_path=path)
    assert config.extractor.fallback_threshold == 10
    assert config.extractor.marker == "FILE:"
    assert config.context.max_files == 5
    assert config.context.excluded_dirs == ["out"]


def test_env_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write(tmp_path, "extractor:\n  fallback_threshold: 10\n")
    monkeypatch.setenv("CODEHARVEST_FALLBACK_THRESHOLD", "99")
    monkeypatch.setenv("CODEHARVEST_MARKER", "PATH:")
    config = Config(config_path=path)
    assert config.extractor.fallback_threshold == 99
    assert config.extractor.marker == "PATH:"


def test_invalid_env_value(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = _write(tmp_path, "")
    monkeypatch.setenv("CODEHARVEST_MAX_FILES", "many")
    with pytest.raises(ConfigurationError, match="CODEHARVEST_MAX_FILES"):
        Config(config_path=path)


def test_unknown_key(tmp_path: Path) -> None:
    path = _write(tmp_path, "extractor:\n  markr: 'X:'\n")
    with pytest.raises(ConfigurationError, match="markr"):
        Config(config_path=path)


def test_invalid_values(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        Config(config_path=_write(tmp_path, "extractor:\n  max_path_length: 0\n"))
    with pytest.raises(ConfigurationError):
        Config(config_path=_write(tmp_path, "extractor:\n  fallback_threshold: lots\n"))
    with pytest.raises(ConfigurationError):
        Config(config_path=_write(tmp_path, "- just\n- a list\n"))


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        Config(config_path=tmp_path / "nope.yaml")
