"""Content generator interfaces and provider implementations."""

from __future__ import annotations

from .base import ContentGenerator
from .openai import OpenAICompatibleContentGenerator, OpenAIStreamIterator
from .stream import (
    BaseStreamIterator,
    OpenAIStreamNormalizer,
    ServerSentEventDecoder,
    replay_stream,
    replay_text,
)
from .transport import HttpTransport, ResponseStream
from .utils import (
    build_chat_request,
    contents_to_openai,
    estimate_tokens,
    openai_to_response,
)

__all__ = [
    "BaseStreamIterator",
    "ContentGenerator",
    "HttpTransport",
    "OpenAICompatibleContentGenerator",
    "OpenAIStreamIterator",
    "OpenAIStreamNormalizer",
    "ResponseStream",
    "ServerSentEventDecoder",
    "build_chat_request",
    "contents_to_openai",
    "estimate_tokens",
    "openai_to_response",
    "replay_stream",
    "replay_text",
]
