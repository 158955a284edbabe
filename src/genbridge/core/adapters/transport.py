"""HTTP transport for chat completions, backed by ``httpx``."""

from __future__ import annotations

import contextlib
import json
from collections.abc import AsyncGenerator, AsyncIterator, Mapping
from typing import Any

import httpx

from ..errors import AdapterError, MissingResponseBodyError, TransportError

DEFAULT_TIMEOUT = httpx.Timeout(60.0, connect=10.0)


class ResponseStream:
    """An open streaming response: status line plus a chunked byte reader.

    When the transport created a client just for this call, the stream owns it
    and closes it together with the response.
    """

    def __init__(self, response: httpx.Response, *, owned_client: httpx.AsyncClient | None = None) -> None:
        self._response = response
        self._owned_client = owned_client
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason_phrase(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def closed(self) -> bool:
        return self._closed

    async def iter_bytes(self) -> AsyncGenerator[bytes, None]:
        try:
            async for chunk in self._response.aiter_bytes():
                if chunk:
                    yield chunk
        except httpx.HTTPError as exc:
            raise _network_error(exc) from exc

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            if self._owned_client is not None:
                await self._owned_client.aclose()


class HttpTransport:
    """POST JSON bodies to an OpenAI-compatible server.

    Pass ``client`` to share a connection pool; the caller then owns its
    lifetime. Without one, every call opens and closes its own client.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: httpx.Timeout | float | None = DEFAULT_TIMEOUT,
    ) -> None:
        self._client = client
        self._timeout = timeout

    async def post_json(
        self,
        url: str,
        payload: Mapping[str, Any],
        *,
        headers: Mapping[str, str],
    ) -> Any:
        async with self._client_scope() as client:
            try:
                response = await client.post(url, content=_encode(payload), headers=dict(headers))
            except httpx.HTTPError as exc:
                raise _network_error(exc) from exc

            _raise_for_status(response)
            try:
                return response.json()
            except ValueError as exc:
                msg = "OpenAI response body is not valid JSON"
                raise AdapterError(msg) from exc

    async def open_stream(
        self,
        url: str,
        payload: Mapping[str, Any],
        *,
        headers: Mapping[str, str],
    ) -> ResponseStream:
        owned_client = None
        client = self._client
        if client is None:
            client = owned_client = self._new_client()

        request = client.build_request("POST", url, content=_encode(payload), headers=dict(headers))
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            if owned_client is not None:
                await owned_client.aclose()
            raise _network_error(exc) from exc

        stream = ResponseStream(response, owned_client=owned_client)
        try:
            _raise_for_status(response)
            if _has_no_body(response):
                raise MissingResponseBodyError(response.status_code)
        except TransportError:
            await stream.aclose()
            raise
        return stream

    @contextlib.asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with self._new_client() as client:
            yield client

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout)


def _encode(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload).encode("utf-8")


def _raise_for_status(response: httpx.Response) -> None:
    if not response.is_success:
        raise TransportError(response.status_code, response.reason_phrase)


def _has_no_body(response: httpx.Response) -> bool:
    return response.status_code == httpx.codes.NO_CONTENT or response.headers.get("content-length") == "0"


def _network_error(exc: httpx.HTTPError) -> TransportError:
    detail = str(exc) or type(exc).__name__
    return TransportError(None, detail)


__all__ = ["DEFAULT_TIMEOUT", "HttpTransport", "ResponseStream"]
