"""Text-to-speech synthesis and script splitting components."""

from .script_splitter import split_for_synthesis
from .synthesizer import OpenAITTSSynthesizer, SpeechSynthesizer

__all__ = ["OpenAITTSSynthesizer", "SpeechSynthesizer", "split_for_synthesis"]
