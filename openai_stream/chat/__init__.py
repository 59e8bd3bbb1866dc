"""Caller-facing chat types."""

from .models import (
    FALLBACK_MODEL_ID,
    OPENAI_MODELS,
    Message,
    OpenAIModel,
    OpenAIModelID,
    Role,
    get_model,
)

__all__ = [
    "FALLBACK_MODEL_ID",
    "OPENAI_MODELS",
    "Message",
    "OpenAIModel",
    "OpenAIModelID",
    "Role",
    "get_model",
]
