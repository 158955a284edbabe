"""Wire schemas for the OpenAI-style chat completions API."""

from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

WireRole = Literal["system", "user", "assistant"]


class WireMessage(BaseModel):
    """A chat message as sent to the server."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    role: WireRole = Field(..., description="Chat role; caller 'model' turns are sent as 'assistant'.")
    content: str = Field(..., description="Newline-joined text of every text part in the turn.")


class ChatCompletionRequest(BaseModel):
    """Request body for ``POST /chat/completions``."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    model: str = Field(..., description="Model identifier configured on the adapter.")
    messages: List[WireMessage] = Field(default_factory=list, description="Ordered conversation, system message first when present.")
    temperature: float | None = Field(None, description="Sampling temperature, omitted when unset.")
    max_tokens: int | None = Field(None, description="Upper bound on generated tokens, omitted when unset.")
    top_p: float | None = Field(None, description="Nucleus sampling mass, omitted when unset.")
    stream: bool = Field(False, description="Whether the server should answer with server-sent events.")

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body with unset sampling options left out."""

        return self.model_dump(exclude_none=True)


class ResponseMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    content: str | None = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    message: ResponseMessage | None = None
    finish_reason: str | None = None


class Usage(BaseModel):
    """Token usage block; a missing block and a zeroed block are different things."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class ChatCompletionResponse(BaseModel):
    """Complete (non-streaming) chat completion response."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    choices: List[Choice] = Field(default_factory=list)
    usage: Usage | None = None


class Delta(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    content: str | None = None


class ChunkChoice(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    delta: Delta | None = None
    finish_reason: str | None = None


class ChatCompletionChunk(BaseModel):
    """Body of one ``data:`` frame in a streamed chat completion."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    choices: List[ChunkChoice] = Field(default_factory=list)


__all__ = [
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "Choice",
    "ChunkChoice",
    "Delta",
    "ResponseMessage",
    "Usage",
    "WireMessage",
    "WireRole",
]
