"""Wire schemas: Ollama's native chat reply and the OpenAI chat completion."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt


# ---------------------------------------------------------------------------
# Local provider (Ollama /api/chat, non-streaming)
# ---------------------------------------------------------------------------


class OllamaMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str | None = None
    content: str | None = None


class OllamaChatResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    model: str | None = None
    message: OllamaMessage | None = None
    # null reads as not finished
    done: bool | None = None
    prompt_eval_count: StrictInt | None = None
    eval_count: StrictInt | None = None


# ---------------------------------------------------------------------------
# Canonical response (OpenAI chat.completion)
# ---------------------------------------------------------------------------


class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str = ""


class ChatChoice(BaseModel):
    index: int = 0
    message: AssistantMessage = Field(default_factory=AssistantMessage)
    finish_reason: Literal["stop"] | None = None


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatCompletionResponse(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: list[ChatChoice]
    usage: Usage


# ---------------------------------------------------------------------------
# Auxiliary endpoints
# ---------------------------------------------------------------------------


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: str


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: list[ModelCard]
