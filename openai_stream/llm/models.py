"""
Core LLM dataclasses for the OpenAI streaming adapter.

This module provides the foundational dataclasses for one exchange:
- Provider configuration (OpenAI vs Azure OpenAI)
- Request policy (fixed overrides applied to every request)
- The outbound chat completion request
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ProviderType(Enum):
    """Supported API flavors."""
    OPENAI = "openai"
    AZURE = "azure"


class FinishReason(Enum):
    """OpenAI-compatible finish reasons."""
    STOP = "stop"
    LENGTH = "length"
    TOOL_CALLS = "tool_calls"
    CONTENT_FILTER = "content_filter"


DEFAULT_API_HOST = "https://api.openai.com"
DEFAULT_API_VERSION = "2023-03-15-preview"


@dataclass(frozen=True)
class ProviderConfig:
    """Provider configuration, read once and passed to the adapter."""
    api_type: ProviderType = ProviderType.OPENAI
    api_host: str = DEFAULT_API_HOST
    api_version: str = DEFAULT_API_VERSION
    azure_deployment_id: str = ""
    organization: str = ""
    default_api_key: str | None = None

    # None leaves deadlines to the caller
    timeout: float | None = None

    @property
    def is_azure(self) -> bool:
        return self.api_type is ProviderType.AZURE

    @property
    def chat_completions_url(self) -> str:
        """Endpoint for the configured flavor."""
        if self.is_azure:
            return (
                f"{self.api_host}/openai/deployments/{self.azure_deployment_id}"
                f"/chat/completions?api-version={self.api_version}"
            )
        return f"{self.api_host}/v1/chat/completions"


@dataclass(frozen=True)
class RequestPolicy:
    """
    Fixed values applied to every request.

    The assessor always runs with a low temperature on the larger-context
    model, whatever the caller asked for. Setting ``temperature``, ``model``
    or ``system_prompt`` to None hands that value back to the caller.
    """
    max_tokens: int = 4000
    temperature: float | None = 0.0
    model: str | None = "gpt-3.5-turbo-16k"
    system_prompt: str | None = None


@dataclass
class ChatCompletionRequest:
    """Outbound chat completion body."""
    messages: list[dict[str, Any]]
    max_tokens: int
    temperature: float
    model: str | None = None
    stream: bool = True

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.model is not None:
            payload["model"] = self.model
        payload.update({
            "messages": self.messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "stream": self.stream,
        })
        return payload
