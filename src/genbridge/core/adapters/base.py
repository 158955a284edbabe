"""Content generator interface shared by provider implementations."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..content import CountTokensParameters, EmbedContentParameters, GenerateContentParameters
from ..response import CountTokensResponse, EmbedContentResponse, GenerateContentResponse
from .stream import BaseStreamIterator


class ContentGenerator(ABC):
    """Abstract interface for content generation backends."""

    @abstractmethod
    async def generate_content(self, request: GenerateContentParameters, /) -> GenerateContentResponse:
        """Generate one complete response for ``request``."""

    @abstractmethod
    def generate_content_stream(self, request: GenerateContentParameters, /) -> BaseStreamIterator:
        """Return an async iterator yielding response fragments as they arrive."""

    @abstractmethod
    async def count_tokens(self, request: CountTokensParameters, /) -> CountTokensResponse:
        """Estimate how many tokens ``request.contents`` would consume."""

    @abstractmethod
    async def embed_content(self, request: EmbedContentParameters, /) -> EmbedContentResponse:
        """Embed ``request.contents``."""
