"""Configuration model and loaders for Studyforge.

Responsibilities:
- Define runtime configuration as a typed dataclass with validation.
- Derive segmentation and retry settings for pipeline components.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `StudyforgeConfig`: normalized runtime settings for pipeline runs.
- `ConfigLoader`: static construction helpers for `StudyforgeConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import timedelta
import os
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .audio.merger import SUPPORTED_AUDIO_FORMATS
from .llm.retry import RetryPolicy
from .models.datatypes import SegmentationOptions
from .parsing import (
    normalize_optional_string,
    parse_float,
    parse_int,
    parse_path,
    parse_required_string,
)

_DEFAULT_MODEL = "gpt-4o-mini"
_DEFAULT_TTS_MODEL = "tts-1"
_DEFAULT_TTS_VOICE = "onyx"
_LOG_LEVELS = frozenset({"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"})


@dataclass(slots=True)
class StudyforgeConfig:
    """Runtime configuration for pipeline runs.

    Attributes:
        output_dir: Output directory for generated artifacts.
        store_path: JSON file backing the generated-content store.
        model: Chat model identifier for generation and narration scripts.
        tts_model: Speech model identifier.
        tts_voice: Speech voice identifier.
        temperature: Sampling temperature for chat calls.
        api_key: Optional API key for provider calls.
        max_chunk_size: Upper bound on characters per chunk.
        overlap_size: Characters of context shared by adjacent chunks.
        min_chunk_size: Chunks shorter than this are dropped.
        split_search_window: Backward search window for chunk boundaries.
        max_chunks: Maximum chunks sent to the generative collaborator per run.
        single_call_max_items: Requests up to this many items use one call.
        single_call_max_chars: Source cap for the single-call path.
        similarity_threshold: Jaccard similarity at which items count as duplicates.
        cache_freshness_days: Maximum age of served cached content.
        rate_limit_max: Generations allowed per user per window.
        rate_limit_window_seconds: Rate-limit window length.
        max_retries: Retries after the first attempt for transient failures.
        retry_initial_delay_seconds: First backoff delay.
        retry_max_delay_seconds: Backoff delay ceiling.
        tts_max_chars: Speech engine per-call character ceiling.
        narration_source_max_chars: Source cap for narration script writing.
        audio_format: Encoded audio format (`mp3` or `wav`).
        log_level: Minimum runtime log level.
    """

    output_dir: Path = Path("out")
    store_path: Path = Path("out/content_store.json")
    model: str = _DEFAULT_MODEL
    tts_model: str = _DEFAULT_TTS_MODEL
    tts_voice: str = _DEFAULT_TTS_VOICE
    temperature: float = 0.7
    api_key: str | None = None
    max_chunk_size: int = 8000
    overlap_size: int = 500
    min_chunk_size: int = 1000
    split_search_window: int = 200
    max_chunks: int = 3
    single_call_max_items: int = 5
    single_call_max_chars: int = 12000
    similarity_threshold: float = 0.7
    cache_freshness_days: float = 7.0
    rate_limit_max: int = 10
    rate_limit_window_seconds: int = 3600
    max_retries: int = 3
    retry_initial_delay_seconds: float = 1.0
    retry_max_delay_seconds: float = 10.0
    tts_max_chars: int = 4000
    narration_source_max_chars: int = 10000
    audio_format: str = "mp3"
    log_level: str = "INFO"

    def validate(self) -> None:
        """Validate configuration values before pipeline execution."""

        self.segmentation_options()
        for name in ("model", "tts_model", "tts_voice"):
            parse_required_string(getattr(self, name), name)
        for name in (
            "max_chunks",
            "single_call_max_chars",
            "rate_limit_window_seconds",
            "tts_max_chars",
            "narration_source_max_chars",
        ):
            parse_int(getattr(self, name), name, minimum=1)
        if not 0.0 <= self.temperature <= 2.0:
            raise ValueError("`temperature` must be within 0.0..2.0.")
        if not 0.0 <= self.similarity_threshold <= 1.0:
            raise ValueError("`similarity_threshold` must be within 0.0..1.0.")
        if self.retry_max_delay_seconds < self.retry_initial_delay_seconds:
            raise ValueError(
                "`retry_max_delay_seconds` must be >= `retry_initial_delay_seconds`."
            )
        if self.audio_format not in SUPPORTED_AUDIO_FORMATS:
            supported = ", ".join(SUPPORTED_AUDIO_FORMATS)
            raise ValueError(
                f"Unsupported `audio_format` value `{self.audio_format}`; supported: {supported}."
            )
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"Unsupported `log_level` value `{self.log_level}`.")

    def segmentation_options(self) -> SegmentationOptions:
        """Return segmentation bounds; invalid combinations raise `ValueError`."""

        return SegmentationOptions(
            max_chunk_size=self.max_chunk_size,
            overlap_size=self.overlap_size,
            min_chunk_size=self.min_chunk_size,
            split_search_window=self.split_search_window,
        )

    def retry_policy(self) -> RetryPolicy:
        """Return the retry policy applied around collaborator calls."""

        return RetryPolicy(
            max_retries=self.max_retries,
            initial_delay_seconds=self.retry_initial_delay_seconds,
            max_delay_seconds=self.retry_max_delay_seconds,
        )

    @property
    def cache_freshness_window(self) -> timedelta:
        return timedelta(days=self.cache_freshness_days)

    @property
    def rate_limit_window(self) -> timedelta:
        return timedelta(seconds=self.rate_limit_window_seconds)


def _optional_string(value: object, field_name: str) -> str | None:
    return normalize_optional_string(value)


def _positive_int(value: object, field_name: str) -> int:
    return parse_int(value, field_name, minimum=1)


def _non_negative_int(value: object, field_name: str) -> int:
    return parse_int(value, field_name, minimum=0)


def _upper_string(value: object, field_name: str) -> str:
    return parse_required_string(value, field_name).upper()


def _lower_string(value: object, field_name: str) -> str:
    return parse_required_string(value, field_name).lower()


_FIELD_PARSERS: dict[str, Callable[[object, str], Any]] = {
    "output_dir": parse_path,
    "store_path": parse_path,
    "model": parse_required_string,
    "tts_model": parse_required_string,
    "tts_voice": parse_required_string,
    "temperature": parse_float,
    "api_key": _optional_string,
    "max_chunk_size": _positive_int,
    "overlap_size": _non_negative_int,
    "min_chunk_size": _non_negative_int,
    "split_search_window": _non_negative_int,
    "max_chunks": _positive_int,
    "single_call_max_items": _non_negative_int,
    "single_call_max_chars": _positive_int,
    "similarity_threshold": parse_float,
    "cache_freshness_days": parse_float,
    "rate_limit_max": _non_negative_int,
    "rate_limit_window_seconds": _positive_int,
    "max_retries": _non_negative_int,
    "retry_initial_delay_seconds": parse_float,
    "retry_max_delay_seconds": parse_float,
    "tts_max_chars": _positive_int,
    "narration_source_max_chars": _positive_int,
    "audio_format": _lower_string,
    "log_level": _upper_string,
}


class ConfigLoader:
    """Factory methods for creating `StudyforgeConfig` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(field.name for field in fields(StudyforgeConfig))
    _ENV_PREFIX = "STUDYFORGE_"

    @staticmethod
    def from_yaml(path: Path) -> StudyforgeConfig:
        """Create a validated config from a YAML file."""

        path_text = path.read_text(encoding="utf-8")
        payload = ConfigLoader._parse_yaml_payload(path_text, path)
        return ConfigLoader._build_config_from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        base: StudyforgeConfig | None = None,
    ) -> StudyforgeConfig:
        """Create a validated config from `STUDYFORGE_*` environment variables.

        `OPENAI_API_KEY` is used when `STUDYFORGE_API_KEY` is not set. Values
        absent from the environment keep the `base` config values.
        """

        env_map: Mapping[str, str] = os.environ if env is None else env
        overrides: dict[str, Any] = {}
        for name, parser in _FIELD_PARSERS.items():
            env_key = f"{ConfigLoader._ENV_PREFIX}{name.upper()}"
            raw_value = normalize_optional_string(env_map.get(env_key))
            if raw_value is None:
                continue
            overrides[name] = ConfigLoader._parse_field(
                name, raw_value, parser, f"Environment variable `{env_key}`"
            )

        if "api_key" not in overrides:
            api_key = normalize_optional_string(env_map.get("OPENAI_API_KEY"))
            if api_key is not None:
                overrides["api_key"] = api_key

        config = replace(base if base is not None else StudyforgeConfig(), **overrides)
        config.validate()
        return config

    @staticmethod
    def _parse_yaml_payload(raw_text: str, path: Path) -> Mapping[str, Any]:
        """Parse YAML text and enforce a mapping root payload."""

        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` could not be parsed: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return payload

    @staticmethod
    def _build_config_from_mapping(
        payload: Mapping[str, Any], source_label: str
    ) -> StudyforgeConfig:
        """Build a validated config from a normalized mapping payload."""

        unknown = sorted(
            str(key) for key in set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS)
        )
        if unknown:
            key_list = ", ".join(unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        values: dict[str, Any] = {}
        for name, raw_value in payload.items():
            if raw_value is None:
                continue
            values[name] = ConfigLoader._parse_field(
                name, raw_value, _FIELD_PARSERS[name], source_label
            )

        config = StudyforgeConfig(**values)
        try:
            config.validate()
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
        return config

    @staticmethod
    def _parse_field(
        name: str,
        raw_value: object,
        parser: Callable[[object, str], Any],
        source_label: str,
    ) -> Any:
        """Parse one field value and prefix errors with their source."""

        try:
            return parser(raw_value, name)
        except ValueError as exc:
            raise ValueError(f"{source_label}: {exc}") from exc
