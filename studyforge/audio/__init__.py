"""Audio reassembly components."""

from .merger import SUPPORTED_AUDIO_FORMATS, AudioMerger

__all__ = ["AudioMerger", "SUPPORTED_AUDIO_FORMATS"]
