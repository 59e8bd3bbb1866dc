"""Stream OpenAI chat completions as plain text bytes."""

from openai_stream.chat.models import Message, OpenAIModel
from openai_stream.llm import (
    OpenAIError,
    OpenAIStreamClient,
    ProviderConfig,
    RequestPolicy,
    openai_stream,
)

__version__ = "0.1.0"

__all__ = [
    "Message",
    "OpenAIError",
    "OpenAIModel",
    "OpenAIStreamClient",
    "ProviderConfig",
    "RequestPolicy",
    "openai_stream",
]
