"""Provider factory helpers for generation, narration, and TTS collaborators.

Responsibilities:
- Build concrete collaborator implementations from runtime configuration.
- Keep orchestration independent from concrete provider class construction.

Notes:
- Only `openai` is implemented at the moment.
"""

from __future__ import annotations

from .config import StudyforgeConfig
from .llm.generator import (
    ContentGenerator,
    NarrationWriter,
    OpenAIContentGenerator,
    OpenAINarrationWriter,
)
from .models.content import ContentKind
from .tts.synthesizer import OpenAITTSSynthesizer, SpeechSynthesizer


class ProviderFactory:
    """Factory for provider-backed collaborators used by the pipeline."""

    def __init__(self, config: StudyforgeConfig) -> None:
        self.config = config

    def create_generator(self, kind: ContentKind) -> ContentGenerator:
        """Create an item-set generator for one content kind."""

        if kind is ContentKind.NARRATION:
            raise ValueError("Narration uses `create_narration_writer`.")
        return OpenAIContentGenerator(
            kind=kind,
            model=self.config.model,
            temperature=self.config.temperature,
            api_key=self.config.api_key,
        )

    def create_narration_writer(self) -> NarrationWriter:
        """Create a narration script writer."""

        return OpenAINarrationWriter(
            model=self.config.model,
            temperature=self.config.temperature,
            api_key=self.config.api_key,
        )

    def create_tts_synthesizer(self) -> SpeechSynthesizer:
        """Create a speech synthesizer."""

        return OpenAITTSSynthesizer(
            model=self.config.tts_model,
            voice=self.config.tts_voice,
            audio_format=self.config.audio_format,
            api_key=self.config.api_key,
        )
