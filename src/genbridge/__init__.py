"""Serve a content-generation interface from OpenAI-compatible servers.

The package translates role-tagged ``contents`` requests into chat completion
bodies, translates the JSON (or server-sent event) answers back into
generation responses, and ships a small command line client for manual
checks against a running server.
"""

from __future__ import annotations

from .config import OpenAIConfig
from .core import (
    AdapterError,
    Content,
    GenerateContentConfig,
    GenerateContentParameters,
    GenerateContentResponse,
    Part,
    Role,
)
from .core.adapters import OpenAICompatibleContentGenerator

__all__ = [
    "AdapterError",
    "Content",
    "GenerateContentConfig",
    "GenerateContentParameters",
    "GenerateContentResponse",
    "OpenAICompatibleContentGenerator",
    "OpenAIConfig",
    "Part",
    "Role",
]

__version__ = "0.1.0"
