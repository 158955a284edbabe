"""Core data structures and content generator interfaces for genbridge."""

from __future__ import annotations

from .content import (
    Content,
    CountTokensParameters,
    EmbedContentParameters,
    GenerateContentConfig,
    GenerateContentParameters,
    Part,
    Role,
)
from .errors import AdapterError, InvalidContentsError, MissingResponseBodyError, TransportError
from .response import (
    Candidate,
    ContentEmbedding,
    CountTokensResponse,
    EmbedContentResponse,
    FinishReason,
    GenerateContentResponse,
    UsageMetadata,
)

__all__ = [
    "AdapterError",
    "Candidate",
    "Content",
    "ContentEmbedding",
    "CountTokensParameters",
    "CountTokensResponse",
    "EmbedContentParameters",
    "EmbedContentResponse",
    "FinishReason",
    "GenerateContentConfig",
    "GenerateContentParameters",
    "GenerateContentResponse",
    "InvalidContentsError",
    "MissingResponseBodyError",
    "Part",
    "Role",
    "TransportError",
    "UsageMetadata",
]
