# openai_stream/chat/models.py
from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


class Message(BaseModel):
    """One prior conversation turn."""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class OpenAIModelID(str, Enum):
    GPT_3_5 = "gpt-3.5-turbo"
    GPT_3_5_AZ = "gpt-35-turbo"
    GPT_4 = "gpt-4"
    GPT_4_32K = "gpt-4-32k"


FALLBACK_MODEL_ID = OpenAIModelID.GPT_3_5


class OpenAIModel(BaseModel):
    """
    A chat model as the caller selects it.

    ``max_length`` is a character budget for prompts and ``token_limit`` the
    model's context window.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = ""
    max_length: int = 12000
    token_limit: int = 4000


OPENAI_MODELS: dict[str, OpenAIModel] = {
    OpenAIModelID.GPT_3_5.value: OpenAIModel(
        id=OpenAIModelID.GPT_3_5.value,
        name="GPT-3.5",
        max_length=12000,
        token_limit=4000,
    ),
    OpenAIModelID.GPT_3_5_AZ.value: OpenAIModel(
        id=OpenAIModelID.GPT_3_5_AZ.value,
        name="GPT-3.5",
        max_length=12000,
        token_limit=4000,
    ),
    OpenAIModelID.GPT_4.value: OpenAIModel(
        id=OpenAIModelID.GPT_4.value,
        name="GPT-4",
        max_length=24000,
        token_limit=8000,
    ),
    OpenAIModelID.GPT_4_32K.value: OpenAIModel(
        id=OpenAIModelID.GPT_4_32K.value,
        name="GPT-4-32K",
        max_length=96000,
        token_limit=32000,
    ),
}


def get_model(model_id: str) -> OpenAIModel:
    """Catalogue entry for ``model_id``, or a bare model carrying that id."""
    if model_id in OPENAI_MODELS:
        return OPENAI_MODELS[model_id]
    return OpenAIModel(id=model_id, name=model_id)
