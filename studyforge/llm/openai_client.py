"""OpenAI HTTP clients behind the generation and speech collaborators.

Responsibilities:
- Send chat-completions and speech requests over `requests`.
- Assign an `ErrorKind` to every failure before it leaves this module.
- Keep API keys out of any message that reaches logs or the CLI.
"""

from __future__ import annotations

import json
import re
from typing import Any

import requests

from ..errors import CollaboratorError, ErrorKind

_API_BASE_URL = "https://api.openai.com/v1"
_MESSAGE_LIMIT = 180
_SECRET_PATTERNS = (
    (re.compile(r"\bsk-[A-Za-z0-9_-]{8,}\b"), "[redacted-key]"),
    (re.compile(r"(?i)bearer\s+[A-Za-z0-9._-]{12,}"), "Bearer [redacted-token]"),
)


class OpenAIProviderError(CollaboratorError):
    """OpenAI failure carrying its error kind, HTTP status, and provider code."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.CONTRACT_VIOLATION,
        status_code: int | None = None,
        provider_code: str | None = None,
    ) -> None:
        super().__init__(message, kind=kind, status_code=status_code)
        self.provider_code = provider_code


def scrub_message(text: str) -> str:
    """Redact key-like tokens and cap `text` to one short line."""

    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    compact = " ".join(text.split())
    if len(compact) > _MESSAGE_LIMIT:
        return compact[: _MESSAGE_LIMIT - 3] + "..."
    return compact


def classify_status(status_code: int, provider_code: str | None) -> ErrorKind:
    """Map an HTTP failure to an error kind.

    429 is a retryable rate limit unless OpenAI reports `insufficient_quota`.
    408 and 5xx are retryable; any other status means the request itself is bad.
    """

    if status_code == 429:
        if (provider_code or "").lower() == "insufficient_quota":
            return ErrorKind.QUOTA_EXCEEDED
        return ErrorKind.TRANSIENT
    if status_code == 408 or status_code >= 500:
        return ErrorKind.TRANSIENT
    return ErrorKind.INPUT_INVALID


def _error_from_response(response: requests.Response) -> OpenAIProviderError:
    body = bytes(response.content).decode("utf-8", errors="replace").strip()
    message, provider_code = body, None
    try:
        error = json.loads(body).get("error")
    except (ValueError, AttributeError):
        error = None
    if isinstance(error, dict):
        if isinstance(error.get("code"), str):
            provider_code = error["code"].strip() or None
        if isinstance(error.get("message"), str) and error["message"].strip():
            message = error["message"]

    status_code = response.status_code
    kind = classify_status(status_code, provider_code)
    if kind is ErrorKind.TRANSIENT:
        headline = "OpenAI request failed temporarily"
    elif kind is ErrorKind.QUOTA_EXCEEDED:
        headline = "OpenAI quota is insufficient for this request"
    else:
        headline = "OpenAI rejected the request"
    detail = f"{headline} (HTTP {status_code})"
    message = scrub_message(message)
    return OpenAIProviderError(
        f"{detail}: {message}" if message else f"{detail}.",
        kind=kind,
        status_code=status_code,
        provider_code=provider_code,
    )


def _reply_text(body: bytes) -> str:
    """Return the first assistant message of a chat-completions response body."""

    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise OpenAIProviderError("OpenAI returned a non-JSON chat response.") from exc

    choices = payload.get("choices") if isinstance(payload, dict) else None
    first = choices[0] if isinstance(choices, list) and choices else None
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise OpenAIProviderError("OpenAI chat response has no `choices[0].message`.")

    content = message.get("content")
    if isinstance(content, list):
        content = "".join(
            part["text"]
            for part in content
            if isinstance(part, dict)
            and part.get("type") == "text"
            and isinstance(part.get("text"), str)
        )
    text = content.strip() if isinstance(content, str) else ""
    if not text:
        raise OpenAIProviderError("OpenAI chat response message is empty.")
    return text


class _OpenAIBaseClient:
    """API key, base URL and timeout shared by the chat and speech clients."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = _API_BASE_URL,
        timeout_seconds: float = 60.0,
    ) -> None:
        self.api_key = api_key.strip() if isinstance(api_key, str) else ""
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def _post(self, path: str, payload: dict[str, Any]) -> bytes:
        """POST `payload` as JSON and return the raw response body."""

        if not self.api_key:
            raise OpenAIProviderError(
                "Missing OpenAI API key. Set `OPENAI_API_KEY` or `api_key` in the config file.",
                kind=ErrorKind.INPUT_INVALID,
            )
        try:
            response = requests.post(
                f"{self.base_url}{path}",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=payload,
                timeout=self.timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise _error_from_response(exc.response) from exc
        except requests.Timeout as exc:
            raise OpenAIProviderError(
                "OpenAI request timed out.", kind=ErrorKind.TRANSIENT
            ) from exc
        except requests.RequestException as exc:
            raise OpenAIProviderError(
                f"OpenAI request transport error: {scrub_message(str(exc))}",
                kind=ErrorKind.TRANSIENT,
            ) from exc
        return bytes(response.content)


class OpenAIChatClient(_OpenAIBaseClient):
    """Chat-completions client returning the assistant's text."""

    def chat_completion_text(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.0,
        max_tokens: int | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        return _reply_text(self._post("/chat/completions", payload))


class OpenAISpeechClient(_OpenAIBaseClient):
    """`/audio/speech` client returning encoded audio bytes."""

    def synthesize_speech(
        self,
        *,
        model: str,
        voice: str,
        text: str,
        response_format: str = "mp3",
        speed: float = 1.0,
    ) -> bytes:
        audio = self._post(
            "/audio/speech",
            {
                "model": model,
                "voice": voice,
                "input": text,
                "response_format": response_format,
                "speed": speed,
            },
        )
        if not audio:
            raise OpenAIProviderError("OpenAI speech response is empty.")
        return audio
