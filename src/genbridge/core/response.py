"""Caller-facing response types produced by the content generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .content import Content, Part, Role

EMBEDDING_DIMENSIONS = 768


class FinishReason(str, Enum):
    """Why a candidate stopped. An unset reason is represented by ``None``."""

    STOP = "STOP"
    OTHER = "OTHER"


@dataclass(frozen=True, slots=True)
class Candidate:
    """One generated alternative wrapping a model turn."""

    content: Content
    index: int = 0
    finish_reason: FinishReason | None = None

    @classmethod
    def from_text(
        cls,
        text: str,
        *,
        index: int = 0,
        finish_reason: FinishReason | None = None,
    ) -> "Candidate":
        content = Content(role=Role.MODEL, parts=(Part(text=text),))
        return cls(content=content, index=index, finish_reason=finish_reason)


@dataclass(frozen=True, slots=True)
class UsageMetadata:
    """Token accounting reported by the server.

    Individual counts stay ``None`` when the server omits them.
    """

    prompt_token_count: int | None = None
    candidates_token_count: int | None = None
    total_token_count: int | None = None


@dataclass(frozen=True, slots=True)
class GenerateContentResponse:
    """A complete response, or one fragment of a streamed response."""

    candidates: tuple[Candidate, ...] = ()
    usage_metadata: UsageMetadata | None = None

    @property
    def text(self) -> str:
        """Concatenated text of the first candidate, empty without candidates."""

        if not self.candidates:
            return ""
        return "".join(self.candidates[0].content.text_parts())

    @property
    def finish_reason(self) -> FinishReason | None:
        if not self.candidates:
            return None
        return self.candidates[0].finish_reason

    # Function calling and code execution are not translated; these views
    # keep the shape callers of the generation SDK expect.
    @property
    def data(self) -> str:
        return ""

    @property
    def function_calls(self) -> list[Any]:
        return []

    @property
    def executable_code(self) -> str:
        return ""

    @property
    def code_execution_result(self) -> str:
        return ""


@dataclass(frozen=True, slots=True)
class CountTokensResponse:
    total_tokens: int


@dataclass(frozen=True, slots=True)
class ContentEmbedding:
    values: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class EmbedContentResponse:
    embeddings: tuple[ContentEmbedding, ...] = field(default_factory=tuple)


__all__ = [
    "EMBEDDING_DIMENSIONS",
    "Candidate",
    "ContentEmbedding",
    "CountTokensResponse",
    "EmbedContentResponse",
    "FinishReason",
    "GenerateContentResponse",
    "UsageMetadata",
]
