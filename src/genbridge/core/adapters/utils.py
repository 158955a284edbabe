"""Pure conversion helpers between caller content and the chat completions wire format."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from genbridge.io.schema import ChatCompletionRequest, ChatCompletionResponse, WireMessage

from ..content import (
    Content,
    GenerateContentConfig,
    GenerateContentParameters,
    Part,
    Role,
    SystemInstruction,
    normalize_contents,
)
from ..errors import AdapterError
from ..response import Candidate, FinishReason, GenerateContentResponse, UsageMetadata

_WIRE_ROLES = {
    Role.USER: "user",
    Role.MODEL: "assistant",
    Role.SYSTEM: "system",
}
CHARS_PER_TOKEN = 4


def content_to_openai(content: Content) -> WireMessage:
    """Flatten one turn into a single wire message."""

    return WireMessage(role=_WIRE_ROLES[content.role], content="\n".join(content.text_parts()))


def contents_to_openai(contents: Any) -> list[WireMessage]:
    """Convert any accepted ``contents`` shape into ordered wire messages."""

    return [content_to_openai(content) for content in normalize_contents(contents)]


def system_instruction_text(instruction: SystemInstruction) -> str:
    if isinstance(instruction, str):
        return instruction
    if isinstance(instruction, Part):
        return instruction.text or ""
    if isinstance(instruction, Content):
        return "\n".join(instruction.text_parts())
    if isinstance(instruction, Mapping):
        if "parts" in instruction:
            return system_instruction_text(Content.from_mapping(instruction))
        return system_instruction_text(Part.from_mapping(instruction))

    msg = f"unsupported system instruction type {type(instruction).__name__}"
    raise AdapterError(msg)


def build_chat_request(
    parameters: GenerateContentParameters,
    *,
    model: str,
    stream: bool,
) -> ChatCompletionRequest:
    """Translate a generation request into a chat completions request body."""

    messages = contents_to_openai(parameters.contents)
    config = parameters.config or GenerateContentConfig()

    if config.system_instruction:
        system_text = system_instruction_text(config.system_instruction)
        messages.insert(0, WireMessage(role="system", content=system_text))

    try:
        return ChatCompletionRequest(
            model=model,
            messages=messages,
            temperature=config.temperature,
            max_tokens=config.max_output_tokens,
            top_p=config.top_p,
            stream=stream,
        )
    except ValidationError as exc:
        msg = f"invalid generation config: {exc.errors()[0]['msg']}"
        raise AdapterError(msg) from exc


def openai_to_response(payload: Mapping[str, Any] | Any) -> GenerateContentResponse:
    """Translate a complete chat completion into a caller-facing response."""

    try:
        completion = ChatCompletionResponse.model_validate(payload)
    except ValidationError as exc:
        msg = "OpenAI response has an unexpected shape"
        raise AdapterError(msg) from exc

    if not completion.choices:
        return GenerateContentResponse()

    choice = completion.choices[0]
    text = (choice.message.content if choice.message else None) or ""
    finish_reason = FinishReason.STOP if choice.finish_reason == "stop" else FinishReason.OTHER
    candidate = Candidate.from_text(text, index=0, finish_reason=finish_reason)

    usage_metadata = None
    if completion.usage is not None:
        usage_metadata = UsageMetadata(
            prompt_token_count=completion.usage.prompt_tokens,
            candidates_token_count=completion.usage.completion_tokens,
            total_token_count=completion.usage.total_tokens,
        )

    return GenerateContentResponse(candidates=(candidate,), usage_metadata=usage_metadata)


def estimate_tokens(contents: Any) -> int:
    """Approximate the token count of ``contents`` as characters / 4, rounded up.

    This is not a tokenizer; it only gives callers a cheap order of magnitude.
    """

    text = " ".join(_iter_text(normalize_contents(contents)))
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def build_headers(api_key: str | None) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _iter_text(contents: Iterable[Content]) -> Iterable[str]:
    for content in contents:
        yield from content.text_parts()


__all__ = [
    "CHARS_PER_TOKEN",
    "build_chat_request",
    "build_headers",
    "content_to_openai",
    "contents_to_openai",
    "estimate_tokens",
    "openai_to_response",
    "system_instruction_text",
]
