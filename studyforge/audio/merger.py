"""Audio reassembly stage.

Responsibilities:
- Join synthesized audio segments into one continuous output.
- Preserve strict segment order; speech is sequential.
"""

from __future__ import annotations

import io
import wave
from typing import Sequence

SUPPORTED_AUDIO_FORMATS = ("mp3", "wav")


class AudioMerger:
    """Merge encoded audio segments into one output payload."""

    def concatenate(self, segments: Sequence[bytes], audio_format: str = "mp3") -> bytes:
        """Join ordered segments into one payload of `audio_format`.

        MP3 frames are self-delimiting, so MP3 segments are joined byte-wise.
        WAV segments are decoded and their frames rewritten under one header.

        Raises:
            ValueError: If the format is unsupported or WAV parameters differ.
        """

        normalized_format = audio_format.strip().lower()
        if normalized_format == "mp3":
            return b"".join(segments)
        if normalized_format == "wav":
            return self._merge_wav(segments)
        supported = ", ".join(SUPPORTED_AUDIO_FORMATS)
        raise ValueError(f"Unsupported audio format `{audio_format}`; supported: {supported}.")

    def _merge_wav(self, segments: Sequence[bytes]) -> bytes:
        """Merge WAV segments into one WAV payload."""

        output = io.BytesIO()
        if not segments:
            with wave.open(output, "wb") as merged:
                merged.setnchannels(1)
                merged.setsampwidth(2)
                merged.setframerate(24000)
                merged.writeframes(b"")
            return output.getvalue()

        with wave.open(io.BytesIO(segments[0]), "rb") as first:
            channels = first.getnchannels()
            sample_width = first.getsampwidth()
            framerate = first.getframerate()

        with wave.open(output, "wb") as merged:
            merged.setnchannels(channels)
            merged.setsampwidth(sample_width)
            merged.setframerate(framerate)

            for position, segment in enumerate(segments):
                with wave.open(io.BytesIO(segment), "rb") as chunk:
                    if (
                        chunk.getnchannels() != channels
                        or chunk.getsampwidth() != sample_width
                        or chunk.getframerate() != framerate
                    ):
                        raise ValueError(
                            f"Incompatible WAV parameters for segment {position}."
                        )
                    merged.writeframes(chunk.readframes(chunk.getnframes()))

        return output.getvalue()
