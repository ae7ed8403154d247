"""Integration-test fixtures for deterministic provider behavior."""

from __future__ import annotations

import io
import json
import wave

import pytest

from studyforge.llm.openai_client import OpenAIChatClient, OpenAISpeechClient

_NARRATION_SCRIPT = " ".join(
    f"Key idea number {index} explains how the source material fits together."
    for index in range(40)
)


def _wav_segment(frame_count: int = 2400) -> bytes:
    """Return a short silent mono 24 kHz WAV payload."""

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(24000)
        wav_file.writeframes(b"\x00\x00" * frame_count)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def _mock_openai_calls(monkeypatch: pytest.MonkeyPatch) -> None:
    """Mock OpenAI calls in integration tests to avoid network/key requirements."""

    def _mock_chat_completion(self, **kwargs: object) -> str:
        """Return a quiz JSON reply, or a narration script for narration prompts."""

        _ = self
        system_prompt = str(kwargs.get("system_prompt", ""))
        if "narrat" in system_prompt.lower():
            return _NARRATION_SCRIPT
        questions = [
            {
                "question": f"integration-question-{index}",
                "options": ["alpha", "beta", "gamma", "delta"],
                "correctAnswer": index % 4,
                "explanation": "Deterministic mocked explanation.",
            }
            for index in range(5)
        ]
        return "Here are the questions:\n" + json.dumps(questions)

    def _mock_synthesize_speech(self, **kwargs: object) -> bytes:
        """Return a deterministic placeholder WAV payload for the TTS stage."""

        _ = self
        _ = kwargs
        return _wav_segment()

    monkeypatch.setattr(OpenAIChatClient, "chat_completion_text", _mock_chat_completion)
    monkeypatch.setattr(OpenAISpeechClient, "synthesize_speech", _mock_synthesize_speech)
