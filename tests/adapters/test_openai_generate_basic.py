from __future__ import annotations

import asyncio
import logging

import httpx
import pytest

from genbridge.config import OpenAIConfig
from genbridge.core import (
    Content,
    CountTokensParameters,
    EmbedContentParameters,
    FinishReason,
    GenerateContentConfig,
    GenerateContentParameters,
    InvalidContentsError,
    Part,
    Role,
    TransportError,
)
from genbridge.core.adapters.openai import OpenAICompatibleContentGenerator
from genbridge.core.response import EMBEDDING_DIMENSIONS

from tests.fixtures.sse_fake import RecordingHandler, build_client, completion_body, json_handler

ENDPOINT = "http://llm.test/v1"


def _generator(handler, *, api_key: str | None = None) -> OpenAICompatibleContentGenerator:
    config = OpenAIConfig(endpoint=ENDPOINT, model="local-model", api_key=api_key)
    return OpenAICompatibleContentGenerator(config, client=build_client(handler))


def test_generate_posts_chat_completion_and_translates_response() -> None:
    handler = json_handler(
        completion_body("All systems nominal.", usage={"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8})
    )
    generator = _generator(handler)

    request = GenerateContentParameters(
        contents=[
            Content(role=Role.USER, parts=(Part(text="Status?"),)),
            Content(role=Role.MODEL, parts=(Part(text="Checking"), Part(text="now"))),
            Content(role=Role.USER, parts=(Part(text="Well?"),)),
        ],
        config=GenerateContentConfig(system_instruction="Monitor", temperature=0.1),
        model="caller-model",
    )

    response = asyncio.run(generator.generate_content(request))

    assert response.text == "All systems nominal."
    assert response.finish_reason is FinishReason.STOP
    assert response.usage_metadata is not None
    assert response.usage_metadata.total_token_count == 8

    [http_request] = handler.requests
    assert http_request.method == "POST"
    assert str(http_request.url) == f"{ENDPOINT}/chat/completions"
    assert http_request.headers["content-type"] == "application/json"
    assert "authorization" not in http_request.headers

    [payload] = handler.payloads
    assert payload == {
        "model": "local-model",
        "messages": [
            {"role": "system", "content": "Monitor"},
            {"role": "user", "content": "Status?"},
            {"role": "assistant", "content": "Checking\nnow"},
            {"role": "user", "content": "Well?"},
        ],
        "temperature": 0.1,
        "stream": False,
    }


def test_generate_sends_bearer_token_when_configured() -> None:
    handler = json_handler(completion_body("ok"))
    generator = _generator(handler, api_key="sk-test")

    asyncio.run(generator.generate_content(GenerateContentParameters(contents="hi")))

    [http_request] = handler.requests
    assert http_request.headers["authorization"] == "Bearer sk-test"


def test_generate_with_length_finish_reason_maps_to_other() -> None:
    generator = _generator(json_handler(completion_body("cut", finish_reason="length")))

    response = asyncio.run(generator.generate_content(GenerateContentParameters(contents="hi")))

    assert response.text == "cut"
    assert response.finish_reason is FinishReason.OTHER
    assert response.usage_metadata is None


def test_generate_without_choices_returns_empty_response() -> None:
    generator = _generator(json_handler({"choices": []}))

    response = asyncio.run(generator.generate_content(GenerateContentParameters(contents="hi")))

    assert response.candidates == ()
    assert response.text == ""


def test_generate_raises_transport_error_on_http_failure(caplog: pytest.LogCaptureFixture) -> None:
    handler = json_handler({"error": {"message": "overloaded"}}, status_code=503)
    generator = _generator(handler)

    with caplog.at_level(logging.ERROR, logger="genbridge.core.adapters.openai"):
        with pytest.raises(TransportError) as excinfo:
            asyncio.run(generator.generate_content(GenerateContentParameters(contents="hi")))

    assert excinfo.value.status_code == 503
    assert excinfo.value.status_text == "Service Unavailable"
    assert str(excinfo.value) == "OpenAI API error: 503 Service Unavailable"
    assert len(handler.requests) == 1
    assert "Error calling OpenAI compatible API" in caplog.text


def test_generate_wraps_network_failures() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    generator = _generator(refuse)

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(generator.generate_content(GenerateContentParameters(contents="hi")))

    assert excinfo.value.status_code is None
    assert "connection refused" in str(excinfo.value)


def test_invalid_contents_fail_before_any_request() -> None:
    handler = json_handler(completion_body("unused"))
    generator = _generator(handler)

    with pytest.raises(InvalidContentsError):
        asyncio.run(generator.generate_content(GenerateContentParameters(contents=123)))

    assert handler.requests == []


def test_generator_accepts_mapping_config() -> None:
    handler = RecordingHandler(lambda: httpx.Response(200, json=completion_body("hey")))
    generator = OpenAICompatibleContentGenerator(
        {"endpoint": ENDPOINT + "/", "model": "m", "apiKey": "k"},
        client=build_client(handler),
    )

    response = asyncio.run(generator.generate_content(GenerateContentParameters(contents="hi")))

    assert response.text == "hey"
    assert generator.config.chat_completions_url == f"{ENDPOINT}/chat/completions"


@pytest.mark.parametrize(
    ("contents", "expected"),
    [
        ("", 0),
        ([], 0),
        ("abcd", 1),
        ("abcdefgh", 2),
        ("abcde", 2),
        ([Content.from_text("ab"), Content.from_text("cd", role=Role.MODEL)], 2),
        (Content(role=Role.USER, parts=(Part(data={"inlineData": {}}),)), 0),
    ],
)
def test_count_tokens_estimates_by_characters(contents, expected) -> None:
    generator = _generator(json_handler({}))

    result = asyncio.run(generator.count_tokens(CountTokensParameters(contents=contents)))

    assert result.total_tokens == expected


def test_embed_content_returns_zero_vector_placeholder() -> None:
    handler = json_handler({})
    generator = _generator(handler)

    result = asyncio.run(generator.embed_content(EmbedContentParameters(contents="anything")))

    [embedding] = result.embeddings
    assert len(embedding.values) == EMBEDDING_DIMENSIONS == 768
    assert set(embedding.values) == {0.0}
    assert handler.requests == []
