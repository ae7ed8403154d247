"""LLM and resilience integration layer.

Contains the OpenAI client, generative collaborator adapters, prompts, and
the retry, rate-limit, and cache policies wrapped around collaborator calls.
"""

from .cache import ContentCache, stringify_params
from .generator import (
    ContentGenerator,
    NarrationWriter,
    OpenAIContentGenerator,
    OpenAINarrationWriter,
    extract_json_array,
)
from .openai_client import OpenAIChatClient, OpenAIProviderError, OpenAISpeechClient
from .prompts import PromptLibrary
from .rate_limiter import RateLimiter
from .retry import RetryPolicy, with_retry

__all__ = [
    "ContentCache",
    "ContentGenerator",
    "NarrationWriter",
    "OpenAIChatClient",
    "OpenAIContentGenerator",
    "OpenAINarrationWriter",
    "OpenAIProviderError",
    "OpenAISpeechClient",
    "PromptLibrary",
    "RateLimiter",
    "RetryPolicy",
    "extract_json_array",
    "stringify_params",
    "with_retry",
]
