"""Content generator that talks to an OpenAI-compatible chat completions server."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable, Mapping
from typing import Any

import httpx

from genbridge.config import OpenAIConfig

from ..content import CountTokensParameters, EmbedContentParameters, GenerateContentParameters
from ..errors import AdapterError
from ..response import (
    EMBEDDING_DIMENSIONS,
    ContentEmbedding,
    CountTokensResponse,
    EmbedContentResponse,
    GenerateContentResponse,
)
from .base import ContentGenerator
from .stream import BaseStreamIterator, OpenAIStreamNormalizer, StreamNormalizer
from .transport import HttpTransport, ResponseStream
from .utils import build_chat_request, build_headers, estimate_tokens, openai_to_response

LOGGER = logging.getLogger(__name__)

StreamOpener = Callable[[], Awaitable[ResponseStream]]


class OpenAICompatibleContentGenerator(ContentGenerator):
    """Serve content generation requests from a chat completions endpoint.

    The generator holds configuration only; every call builds its own request,
    buffers and (unless a shared ``client`` is given) its own HTTP client, so a
    single instance can serve concurrent calls.
    """

    def __init__(
        self,
        config: OpenAIConfig | Mapping[str, Any],
        *,
        client: httpx.AsyncClient | None = None,
        transport: HttpTransport | None = None,
    ) -> None:
        if isinstance(config, Mapping):
            config = OpenAIConfig.from_mapping(config)
        if client is not None and transport is not None:
            msg = "pass either 'client' or 'transport', not both"
            raise ValueError(msg)

        self._config = config
        self._transport = transport or HttpTransport(client=client)

    @property
    def config(self) -> OpenAIConfig:
        return self._config

    async def generate_content(self, request: GenerateContentParameters, /) -> GenerateContentResponse:
        payload = build_chat_request(request, model=self._config.model, stream=False).to_payload()
        LOGGER.debug(
            "POST %s model=%s messages=%d",
            self._config.chat_completions_url,
            self._config.model,
            len(payload["messages"]),
        )

        try:
            completion = await self._transport.post_json(
                self._config.chat_completions_url,
                payload,
                headers=build_headers(self._config.api_key),
            )
            return openai_to_response(completion)
        except AdapterError as exc:
            LOGGER.error("Error calling OpenAI compatible API: %s", exc)
            raise

    def generate_content_stream(self, request: GenerateContentParameters, /) -> OpenAIStreamIterator:
        payload = build_chat_request(request, model=self._config.model, stream=True).to_payload()
        url = self._config.chat_completions_url
        headers = build_headers(self._config.api_key)

        async def _open() -> ResponseStream:
            LOGGER.debug("POST %s model=%s stream=true", url, self._config.model)
            return await self._transport.open_stream(url, payload, headers=headers)

        return OpenAIStreamIterator(_open)

    async def count_tokens(self, request: CountTokensParameters, /) -> CountTokensResponse:
        return CountTokensResponse(total_tokens=estimate_tokens(request.contents))

    async def embed_content(self, request: EmbedContentParameters, /) -> EmbedContentResponse:
        # Placeholder: no embedding endpoint is called.
        values = (0.0,) * EMBEDDING_DIMENSIONS
        return EmbedContentResponse(embeddings=(ContentEmbedding(values=values),))


class OpenAIStreamIterator(BaseStreamIterator):
    """Stream iterator that reads chat completion SSE bytes lazily.

    The HTTP request is only sent when the first fragment is requested. The
    response (and any client opened for it) is released when iteration ends,
    fails, or the iterator is closed. A consumer that stops early must use
    ``async with`` or call ``aclose()``; breaking out of ``async for`` alone
    leaves the response open until garbage collection.
    """

    def __init__(
        self,
        opener: StreamOpener,
        *,
        normalizer: StreamNormalizer | None = None,
    ) -> None:
        self._opener = opener
        self._stream: ResponseStream | None = None
        self._chunks: AsyncGenerator[bytes, None] | None = None
        super().__init__(normalizer or OpenAIStreamNormalizer())

    async def _get_next_chunk(self) -> bytes:
        try:
            if self._chunks is None:
                self._stream = await self._opener()
                self._chunks = self._stream.iter_bytes()
            return await self._chunks.__anext__()
        except StopAsyncIteration:
            raise
        except AdapterError as exc:
            LOGGER.error("Error calling OpenAI compatible streaming API: %s", exc)
            raise

    async def _on_close(self) -> None:
        chunks, self._chunks = self._chunks, None
        stream, self._stream = self._stream, None
        try:
            if chunks is not None:
                await chunks.aclose()
        finally:
            if stream is not None:
                await stream.aclose()


__all__ = ["OpenAICompatibleContentGenerator", "OpenAIStreamIterator"]
