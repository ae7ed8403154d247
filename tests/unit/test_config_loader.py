"""Unit tests for YAML/environment configuration loader behavior."""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

import pytest

from studyforge.config import ConfigLoader, StudyforgeConfig


def test_default_config_is_valid_and_derives_component_settings() -> None:
    """Defaults should validate and produce matching segmentation and retry settings."""

    config = StudyforgeConfig()

    config.validate()
    options = config.segmentation_options()
    policy = config.retry_policy()

    assert (options.max_chunk_size, options.overlap_size, options.min_chunk_size) == (
        8000,
        500,
        1000,
    )
    assert options.split_search_window == 200
    assert (policy.max_retries, policy.initial_delay_seconds, policy.max_delay_seconds) == (
        3,
        1.0,
        10.0,
    )
    assert config.cache_freshness_window == timedelta(days=7)
    assert config.rate_limit_window == timedelta(hours=1)


def test_config_loader_from_yaml_loads_and_normalizes_values(tmp_path: Path) -> None:
    """YAML loader should parse typed values and trim string tokens."""

    config_path = tmp_path / "studyforge.yml"
    config_path.write_text(
        """
output_dir: " build/out "
model: " gpt-4.1-mini "
tts_voice: " echo "
max_chunk_size: " 4000 "
overlap_size: 200
min_chunk_size: 500
max_chunks: 4
similarity_threshold: 0.5
audio_format: " WAV "
log_level: debug
api_key:
""".strip(),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.output_dir == Path("build/out")
    assert config.model == "gpt-4.1-mini"
    assert config.tts_voice == "echo"
    assert config.max_chunk_size == 4000
    assert config.overlap_size == 200
    assert config.min_chunk_size == 500
    assert config.max_chunks == 4
    assert config.similarity_threshold == 0.5
    assert config.audio_format == "wav"
    assert config.log_level == "DEBUG"
    assert config.api_key is None


def test_config_loader_from_yaml_accepts_empty_file(tmp_path: Path) -> None:
    """An empty YAML document should yield the default configuration."""

    config_path = tmp_path / "empty.yml"
    config_path.write_text("", encoding="utf-8")

    assert ConfigLoader.from_yaml(config_path) == StudyforgeConfig()


def test_config_loader_from_yaml_rejects_unknown_keys_and_bad_values(tmp_path: Path) -> None:
    """YAML loader should fail clearly on unknown keys, bad types, and bad syntax."""

    unknown_path = tmp_path / "unknown.yml"
    unknown_path.write_text("model: gpt-4o-mini\nunknown_field: x\n", encoding="utf-8")
    with pytest.raises(ValueError, match=r"unsupported key\(s\): unknown_field"):
        ConfigLoader.from_yaml(unknown_path)

    bad_type_path = tmp_path / "bad_type.yml"
    bad_type_path.write_text("max_chunks: many\n", encoding="utf-8")
    with pytest.raises(ValueError, match="max_chunks"):
        ConfigLoader.from_yaml(bad_type_path)

    bool_path = tmp_path / "bool.yml"
    bool_path.write_text("max_retries: true\n", encoding="utf-8")
    with pytest.raises(ValueError, match="max_retries"):
        ConfigLoader.from_yaml(bool_path)

    list_path = tmp_path / "list.yml"
    list_path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="top-level mapping"):
        ConfigLoader.from_yaml(list_path)

    broken_path = tmp_path / "broken.yml"
    broken_path.write_text("model: [unterminated\n", encoding="utf-8")
    with pytest.raises(ValueError, match="could not be parsed"):
        ConfigLoader.from_yaml(broken_path)


def test_config_loader_from_yaml_rejects_inconsistent_bounds(tmp_path: Path) -> None:
    """Cross-field validation should reject overlap at or above the chunk size."""

    config_path = tmp_path / "bounds.yml"
    config_path.write_text(
        "max_chunk_size: 1000\noverlap_size: 1000\nmin_chunk_size: 100\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="overlap_size"):
        ConfigLoader.from_yaml(config_path)


def test_config_loader_from_env_overrides_base_values() -> None:
    """Environment variables should override the base config field by field."""

    base = StudyforgeConfig(model="base-model", max_chunks=2)
    env = {
        "STUDYFORGE_MAX_CHUNKS": "5",
        "STUDYFORGE_RATE_LIMIT_MAX": "25",
        "STUDYFORGE_STORE_PATH": "/tmp/store.json",
        "STUDYFORGE_TTS_VOICE": "   ",
    }

    config = ConfigLoader.from_env(env=env, base=base)

    assert config.model == "base-model"
    assert config.max_chunks == 5
    assert config.rate_limit_max == 25
    assert config.store_path == Path("/tmp/store.json")
    assert config.tts_voice == "onyx"


def test_config_loader_from_env_resolves_api_key_precedence() -> None:
    """`STUDYFORGE_API_KEY` should win over `OPENAI_API_KEY`, which is the fallback."""

    fallback = ConfigLoader.from_env(env={"OPENAI_API_KEY": " sk-fallback "})
    explicit = ConfigLoader.from_env(
        env={"OPENAI_API_KEY": "sk-fallback", "STUDYFORGE_API_KEY": "sk-explicit"}
    )
    missing = ConfigLoader.from_env(env={})

    assert fallback.api_key == "sk-fallback"
    assert explicit.api_key == "sk-explicit"
    assert missing.api_key is None


def test_config_loader_from_env_reports_source_of_invalid_values() -> None:
    """Invalid environment values should name the offending variable."""

    with pytest.raises(ValueError, match="STUDYFORGE_TEMPERATURE"):
        ConfigLoader.from_env(env={"STUDYFORGE_TEMPERATURE": "warm"})
    with pytest.raises(ValueError, match="audio_format"):
        ConfigLoader.from_env(env={"STUDYFORGE_AUDIO_FORMAT": "ogg"})
