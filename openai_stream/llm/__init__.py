"""
OpenAI chat completion streaming.

This package provides:
- Provider configuration for OpenAI and Azure OpenAI
- A request policy applied to every call
- Incremental SSE parsing of streamed completions
- Structured upstream errors
"""

from __future__ import annotations

from .client import OpenAIStreamClient, openai_stream
from .exceptions import (
    LLMError,
    OpenAIError,
    ProviderError,
    StreamingError,
    UpstreamError,
)
from .models import (
    ChatCompletionRequest,
    FinishReason,
    ProviderConfig,
    ProviderType,
    RequestPolicy,
)

__all__ = [
    "ChatCompletionRequest",
    "FinishReason",
    # Exceptions
    "LLMError",
    "OpenAIError",
    # Client
    "OpenAIStreamClient",
    "ProviderConfig",
    "ProviderError",
    "ProviderType",
    "RequestPolicy",
    "StreamingError",
    "UpstreamError",
    "openai_stream",
]
