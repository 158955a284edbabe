"""Custom exception types raised by the genbridge adapters."""

from __future__ import annotations


class AdapterError(RuntimeError):
    """Raised when an adapter cannot fulfil a request."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class InvalidContentsError(AdapterError):
    """Raised when request contents are neither a string, a turn, nor a list of turns."""


class TransportError(AdapterError):
    """Raised when the chat completions endpoint cannot be reached or rejects a call.

    ``status_code`` is ``None`` when the failure happened below HTTP (connection
    refused, read timeout, dropped stream).
    """

    def __init__(self, status_code: int | None, status_text: str) -> None:
        self.status_code = status_code
        self.status_text = status_text
        if status_code is None:
            message = f"OpenAI API error: {status_text}"
        else:
            message = f"OpenAI API error: {status_code} {status_text}".rstrip()
        super().__init__(message)


class MissingResponseBodyError(TransportError):
    """Raised when a successful streaming response carries no body to read."""

    def __init__(self, status_code: int | None = None) -> None:
        super().__init__(status_code, "No response body")
        self.args = ("No response body",)
