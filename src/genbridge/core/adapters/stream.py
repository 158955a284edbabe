"""Server-sent event decoding and the base iterator behind streamed responses."""

from __future__ import annotations

import abc
import asyncio
import codecs
import logging
from asyncio import CancelledError
from collections import deque
from typing import AsyncIterator, Deque, List, Optional, Protocol

from pydantic import ValidationError

from genbridge.io.schema import ChatCompletionChunk

from ..response import Candidate, FinishReason, GenerateContentResponse

LOGGER = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class ServerSentEventDecoder:
    """Reassemble complete text lines from arbitrarily split byte chunks.

    Two buffers survive between chunks: the incremental decoder keeps any
    partial multi-byte sequence, and ``_pending`` keeps the text after the
    last newline seen so far.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, chunk: bytes) -> List[str]:
        """Decode ``chunk`` and return the lines it completed, in order."""

        self._pending += self._decoder.decode(chunk)
        *lines, self._pending = self._pending.split("\n")
        return lines

    def flush(self) -> str:
        """Drop and return whatever unterminated text is still buffered."""

        remainder = self._pending + self._decoder.decode(b"", final=True)
        self._pending = ""
        self._decoder.reset()
        return remainder


def frame_payload(line: str) -> Optional[str]:
    """Return the payload of a ``data:`` line, or ``None`` for any other line."""

    if not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload.endswith("\r"):
        payload = payload[:-1]
    return payload


class StreamNormalizer(Protocol):
    async def normalize_chunk(self, chunk: bytes) -> List[GenerateContentResponse]:
        """Map raw stream bytes into zero or more response fragments."""

    def finish(self) -> None:
        """Signal that no further bytes will arrive."""


class OpenAIStreamNormalizer(StreamNormalizer):
    """Turn chat completion SSE bytes into response fragments, one per text delta."""

    def __init__(self, decoder: ServerSentEventDecoder | None = None) -> None:
        self._decoder = decoder or ServerSentEventDecoder()

    async def normalize_chunk(self, chunk: bytes) -> List[GenerateContentResponse]:
        fragments: List[GenerateContentResponse] = []
        for line in self._decoder.feed(chunk):
            payload = frame_payload(line)
            if payload is None or payload == DONE_SENTINEL:
                continue
            fragment = self.normalize_frame(payload)
            if fragment is not None:
                fragments.append(fragment)
        return fragments

    def normalize_frame(self, payload: str) -> GenerateContentResponse | None:
        try:
            frame = ChatCompletionChunk.model_validate_json(payload)
        except ValidationError:
            LOGGER.debug("dropping malformed stream frame: %.200s", payload)
            return None

        if not frame.choices:
            return None
        choice = frame.choices[0]
        content = choice.delta.content if choice.delta else None
        if not content:
            return None

        # Only "stop" is reported; other deltas stay unset so they never look terminal.
        finish_reason = FinishReason.STOP if choice.finish_reason == "stop" else None
        candidate = Candidate.from_text(content, index=0, finish_reason=finish_reason)
        return GenerateContentResponse(candidates=(candidate,))

    def finish(self) -> None:
        remainder = self._decoder.flush()
        if remainder:
            LOGGER.debug("discarding unterminated stream line: %.200s", remainder)


class BaseStreamIterator(AsyncIterator[GenerateContentResponse], metaclass=abc.ABCMeta):
    """Shared async iterator driving streamed content generation.

    Subclasses source raw bytes by implementing :meth:`_get_next_chunk`. Each
    chunk is handed to a :class:`StreamNormalizer`, and the fragments it returns
    are buffered so consumers receive them one at a time, in arrival order.
    Nothing is read until the consumer asks for the next fragment.
    """

    def __init__(self, normalizer: StreamNormalizer) -> None:
        self._normalizer = normalizer
        self._buffer: Deque[GenerateContentResponse] = deque()
        self._closed = False
        self._close_lock = asyncio.Lock()

    def __aiter__(self) -> BaseStreamIterator:
        return self

    async def __anext__(self) -> GenerateContentResponse:
        buffered = self._pop_buffered()
        if buffered is not None:
            return buffered

        while True:
            if self._closed:
                raise StopAsyncIteration

            chunk = await self._consume_chunk()
            fragments = await self._normalizer.normalize_chunk(chunk)
            if not fragments:
                continue

            self._buffer.extend(fragments)
            return self._buffer.popleft()

    async def __aenter__(self) -> BaseStreamIterator:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Release the underlying reader and prevent additional iteration."""

        async with self._close_lock:
            if self._closed:
                return

            self._closed = True
            self._buffer.clear()
            self._normalizer.finish()
            await self._on_close()

    async def aclose(self) -> None:
        await self.close()

    async def _consume_chunk(self) -> bytes:
        try:
            return await self._get_next_chunk()
        except StopAsyncIteration:
            await self.close()
            raise
        except CancelledError:
            await self.close()
            raise
        except Exception:
            await self.close()
            raise

    def _pop_buffered(self) -> GenerateContentResponse | None:
        if not self._buffer:
            return None
        return self._buffer.popleft()

    @abc.abstractmethod
    async def _get_next_chunk(self) -> bytes:
        """Retrieve the next raw chunk of bytes from the response body."""

    async def _on_close(self) -> None:
        """Allow subclasses to dispose transport resources when closing."""


async def replay_stream(iterator: BaseStreamIterator) -> List[GenerateContentResponse]:
    """Collect every fragment emitted by a stream iterator."""

    fragments: List[GenerateContentResponse] = []
    try:
        async for fragment in iterator:
            fragments.append(fragment)
    finally:
        await iterator.close()
    return fragments


async def replay_text(iterator: BaseStreamIterator) -> str:
    """Concatenate the text of every fragment emitted by a stream iterator."""

    fragments = await replay_stream(iterator)
    return "".join(fragment.text for fragment in fragments)


__all__ = [
    "BaseStreamIterator",
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "OpenAIStreamNormalizer",
    "ServerSentEventDecoder",
    "StreamNormalizer",
    "frame_payload",
    "replay_stream",
    "replay_text",
]
