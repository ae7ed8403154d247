"""Generative collaborator interfaces and OpenAI-backed implementations.

Responsibilities:
- Define protocols for item-set generation and narration script writing.
- Extract the structured item list from free-form model replies.
- Report malformed replies as contract violations, never as retryable errors.
"""

from __future__ import annotations

import json
import re
from typing import Any, Protocol

from ..errors import CollaboratorError, ErrorKind
from ..models.content import ContentKind
from .openai_client import OpenAIChatClient
from .prompts import PromptLibrary

_JSON_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


class ContentGenerator(Protocol):
    """Protocol for item-set generation collaborators."""

    def generate(
        self,
        *,
        prompt: str,
        source_text: str,
        budget: int,
        difficulty: str,
    ) -> list[dict[str, Any]]:
        """Return up to `budget` raw item payloads for `source_text`."""


class NarrationWriter(Protocol):
    """Protocol for narration script collaborators."""

    def write_script(self, *, prompt: str, source_text: str, difficulty: str) -> str:
        """Return a spoken-summary script for `source_text`."""


def extract_json_array(reply: str) -> list[Any]:
    """Return the first-to-last bracketed JSON array embedded in `reply`."""

    match = _JSON_ARRAY_RE.search(reply)
    if match is None:
        raise CollaboratorError(
            "Model reply does not contain a JSON array.",
            kind=ErrorKind.CONTRACT_VIOLATION,
        )
    try:
        payload = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise CollaboratorError(
            f"Model reply JSON array is malformed: {exc.msg}.",
            kind=ErrorKind.CONTRACT_VIOLATION,
        ) from exc
    if not isinstance(payload, list):
        raise CollaboratorError(
            "Model reply JSON is not a list.",
            kind=ErrorKind.CONTRACT_VIOLATION,
        )
    return payload


class OpenAIContentGenerator:
    """OpenAI-backed generator for one item-set content kind."""

    def __init__(
        self,
        kind: ContentKind,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        api_key: str | None = None,
        client: OpenAIChatClient | None = None,
    ) -> None:
        """Initialize generator settings and OpenAI client dependencies."""

        self.kind = kind
        self.model = model
        self.temperature = temperature
        self.client = client if client is not None else OpenAIChatClient(api_key=api_key)
        self.prompts = PromptLibrary()

    def generate(
        self,
        *,
        prompt: str,
        source_text: str,
        budget: int,
        difficulty: str,
    ) -> list[dict[str, Any]]:
        """Generate raw item payloads with OpenAI chat-completions."""

        reply = self.client.chat_completion_text(
            model=self.model,
            system_prompt=prompt,
            user_prompt=self.prompts.user_prompt(self.kind, budget, source_text),
            temperature=self.temperature,
            max_tokens=self.prompts.max_tokens(self.kind, budget),
        )
        items = extract_json_array(reply)
        if not all(isinstance(item, dict) for item in items):
            raise CollaboratorError(
                "Model reply JSON array must contain only objects.",
                kind=ErrorKind.CONTRACT_VIOLATION,
            )
        return items


class OpenAINarrationWriter:
    """OpenAI-backed writer for single-narrator audio summary scripts."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        api_key: str | None = None,
        client: OpenAIChatClient | None = None,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.client = client if client is not None else OpenAIChatClient(api_key=api_key)
        self.prompts = PromptLibrary()

    def write_script(self, *, prompt: str, source_text: str, difficulty: str) -> str:
        """Write a narration script with OpenAI chat-completions."""

        return self.client.chat_completion_text(
            model=self.model,
            system_prompt=prompt,
            user_prompt=self.prompts.narration_user_prompt(source_text),
            temperature=self.temperature,
            max_tokens=self.prompts.max_tokens(ContentKind.NARRATION, 0),
        )
