"""
Error handling for the OpenAI streaming adapter.

Two kinds of failure reach the caller:
- OpenAIError: the API answered and explicitly rejected the request
- UpstreamError / StreamingError: anything else (network failure,
  non-JSON error body, malformed streamed JSON)
"""

from __future__ import annotations

from typing import Any


class LLMError(Exception):
    """Base LLM error with rich context."""

    def __init__(
        self,
        message: str,
        provider: str = "openai",
        model: str = "unknown",
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.model = model
        self.status_code = status_code
        self.response_data = response_data or {}


class OpenAIError(LLMError):
    """The API rejected the request; carries its classification fields."""

    def __init__(
        self,
        message: str,
        type: str | None,
        param: str | None,
        code: str | None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.type = type
        self.param = param
        self.code = code

    @classmethod
    def from_payload(cls, error: dict[str, Any], **kwargs: Any) -> OpenAIError:
        """Build from an ``{"error": {...}}`` envelope's inner object."""
        return cls(
            error.get("message") or "",
            error.get("type"),
            error.get("param"),
            error.get("code"),
            **kwargs,
        )


class UpstreamError(LLMError):
    """Transport failure or an error response without an error object."""
    pass


class StreamingError(LLMError):
    """Malformed data inside an otherwise successful event stream."""
    pass


class ProviderError(LLMError):
    """Provider-specific configuration or setup errors."""
    pass
