from __future__ import annotations

import asyncio

from genbridge.core import FinishReason, Role
from genbridge.core.adapters.stream import (
    OpenAIStreamNormalizer,
    ServerSentEventDecoder,
    frame_payload,
)

from tests.fixtures.sse_fake import delta_frame


def _normalize(*chunks: bytes) -> list:
    normalizer = OpenAIStreamNormalizer()

    async def _run() -> list:
        fragments = []
        for chunk in chunks:
            fragments.extend(await normalizer.normalize_chunk(chunk))
        normalizer.finish()
        return fragments

    return asyncio.run(_run())


def test_decoder_returns_complete_lines_and_keeps_the_tail():
    decoder = ServerSentEventDecoder()

    assert decoder.feed(b"data: one\ndata: tw") == ["data: one"]
    assert decoder.feed(b"o\n\n") == ["data: two", ""]
    assert decoder.flush() == ""


def test_decoder_reassembles_multibyte_characters_split_across_chunks():
    encoded = "data: café ✓\n".encode("utf-8")
    split_at = encoded.index(b"\xc3") + 1
    decoder = ServerSentEventDecoder()

    assert decoder.feed(encoded[:split_at]) == []
    assert decoder.feed(encoded[split_at:]) == ["data: café ✓"]


def test_decoder_flush_discards_the_unterminated_line():
    decoder = ServerSentEventDecoder()
    decoder.feed(b"data: partial")

    assert decoder.flush() == "data: partial"
    assert decoder.feed(b"\n") == [""]


def test_frame_payload_only_accepts_data_lines():
    assert frame_payload("data: {}") == "{}"
    assert frame_payload("data: [DONE]\r") == "[DONE]"
    assert frame_payload(": keep-alive") is None
    assert frame_payload("event: message") is None
    assert frame_payload("data:{}") is None
    assert frame_payload("") is None


def test_frame_split_across_two_chunks_yields_one_fragment():
    fragments = _normalize(
        b'data: {"choices":[{"delta":{"content":"He',
        b'llo"}}]}\n\ndata: [DONE]\n',
    )

    [fragment] = fragments
    assert fragment.text == "Hello"
    [candidate] = fragment.candidates
    assert candidate.index == 0
    assert candidate.content.role is Role.MODEL
    assert candidate.finish_reason is None


def test_malformed_frame_is_skipped_without_aborting():
    fragments = _normalize(
        b"data: {not json}\n",
        delta_frame("ok").encode("utf-8"),
    )

    assert [fragment.text for fragment in fragments] == ["ok"]


def test_frames_with_wrong_shape_are_skipped():
    fragments = _normalize(
        b'data: {"choices": "nope"}\n',
        b'data: {"choices":[{"delta":{"content":5}}]}\n',
        b"data: []\n",
        delta_frame("kept").encode("utf-8"),
    )

    assert [fragment.text for fragment in fragments] == ["kept"]


def test_unread_provider_fields_do_not_drop_a_frame():
    fragments = _normalize(
        b'data: {"id": 7, "choices":[{"index": "0", "delta":{"role": 1, "content":"Hi"}}], "usage": "n/a"}\n',
    )

    assert [fragment.text for fragment in fragments] == ["Hi"]


def test_comments_blank_lines_and_empty_deltas_yield_nothing():
    fragments = _normalize(
        b": keep-alive\n\n",
        b"event: ping\n",
        b'data: {"choices":[]}\n',
        delta_frame(None).encode("utf-8"),
        delta_frame("").encode("utf-8"),
        b"data: [DONE]\n",
    )

    assert fragments == []


def test_stop_finish_reason_is_reported_and_others_stay_unset():
    fragments = _normalize(
        delta_frame("a").encode("utf-8"),
        delta_frame("b", finish_reason="length").encode("utf-8"),
        delta_frame("c", finish_reason="stop").encode("utf-8"),
    )

    assert [fragment.finish_reason for fragment in fragments] == [None, None, FinishReason.STOP]


def test_several_frames_in_one_chunk_keep_their_order():
    body = (delta_frame("1") + delta_frame("2") + delta_frame("3")).encode("utf-8")

    fragments = _normalize(body)

    assert [fragment.text for fragment in fragments] == ["1", "2", "3"]


def test_crlf_terminated_frames_are_accepted():
    fragments = _normalize(b'data: {"choices":[{"delta":{"content":"x"}}]}\r\n\r\ndata: [DONE]\r\n')

    assert [fragment.text for fragment in fragments] == ["x"]


def test_unterminated_final_frame_is_discarded():
    fragments = _normalize(
        delta_frame("complete").encode("utf-8"),
        b'data: {"choices":[{"delta":{"content":"lost"}}]}',
    )

    assert [fragment.text for fragment in fragments] == ["complete"]
