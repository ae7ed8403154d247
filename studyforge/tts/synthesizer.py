"""TTS synthesizer interfaces and OpenAI-backed implementation.

Responsibilities:
- Define protocol for piece-level speech synthesis.
- Provide OpenAI-backed speech synthesis returning raw audio bytes.
"""

from __future__ import annotations

from typing import Protocol

from ..llm.openai_client import OpenAISpeechClient


class SpeechSynthesizer(Protocol):
    """Protocol for TTS provider implementations."""

    def synthesize(self, text_chunk: str) -> bytes:
        """Synthesize one script piece into encoded audio bytes."""


class OpenAITTSSynthesizer:
    """OpenAI-backed synthesizer returning one encoded audio segment per call."""

    def __init__(
        self,
        model: str = "tts-1",
        voice: str = "onyx",
        audio_format: str = "mp3",
        speed: float = 1.0,
        api_key: str | None = None,
        client: OpenAISpeechClient | None = None,
    ) -> None:
        """Initialize OpenAI-backed TTS synthesizer settings."""

        self.model = model
        self.voice = voice
        self.audio_format = audio_format
        self.speed = max(0.25, min(4.0, speed))
        self.client = client if client is not None else OpenAISpeechClient(api_key=api_key)

    def synthesize(self, text_chunk: str) -> bytes:
        """Return synthesized audio bytes for one script piece."""

        return self.client.synthesize_speech(
            model=self.model,
            voice=self.voice,
            text=text_chunk,
            response_format=self.audio_format,
            speed=self.speed,
        )
