"""Connection settings for OpenAI-compatible content generators."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

ENV_PREFIX = "GENBRIDGE_"


@dataclass(frozen=True, slots=True)
class OpenAIConfig:
    """Where and how to reach a chat completions server.

    Attributes
    ----------
    endpoint:
        Base URL of the server, for example ``http://localhost:8000/v1``. The
        ``/chat/completions`` path is appended to it; a trailing slash is
        ignored.
    model:
        Model identifier sent with every request, regardless of the model the
        caller names in its request.
    api_key:
        Optional bearer credential. When absent no ``Authorization`` header is
        sent at all.
    """

    endpoint: str
    model: str
    api_key: str | None = None

    def __post_init__(self) -> None:
        endpoint = (self.endpoint or "").strip()
        if not endpoint:
            raise ValueError("endpoint must not be empty")
        model = (self.model or "").strip()
        if not model:
            raise ValueError("model must not be empty")

        object.__setattr__(self, "endpoint", endpoint.rstrip("/"))
        object.__setattr__(self, "model", model)
        object.__setattr__(self, "api_key", self.api_key or None)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "OpenAIConfig":
        """Build a config from a mapping using ``apiKey`` or ``api_key``."""

        api_key = values.get("apiKey", values.get("api_key"))
        return cls(
            endpoint=values.get("endpoint", ""),
            model=values.get("model", ""),
            api_key=api_key,
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        prefix: str = ENV_PREFIX,
        **overrides: str | None,
    ) -> "OpenAIConfig":
        """Read ``<prefix>ENDPOINT``, ``<prefix>MODEL`` and ``<prefix>API_KEY``.

        Parameters
        ----------
        environ:
            Mapping to read from, :data:`os.environ` by default.
        prefix:
            Prefix shared by the variable names.
        overrides:
            ``endpoint``, ``model`` or ``api_key`` values that win over the
            environment when not ``None``.
        """

        source = os.environ if environ is None else environ
        values = {
            "endpoint": source.get(f"{prefix}ENDPOINT", ""),
            "model": source.get(f"{prefix}MODEL", ""),
            "api_key": source.get(f"{prefix}API_KEY"),
        }
        for key, value in overrides.items():
            if key not in values:
                raise TypeError(f"unknown configuration option '{key}'")
            if value is not None:
                values[key] = value
        return cls.from_mapping(values)

    @property
    def chat_completions_url(self) -> str:
        return f"{self.endpoint}/chat/completions"

    def __repr__(self) -> str:
        key = "***" if self.api_key else None
        return f"OpenAIConfig(endpoint={self.endpoint!r}, model={self.model!r}, api_key={key!r})"
