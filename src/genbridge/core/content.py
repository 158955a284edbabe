"""Caller-facing content schema shared by the content generators."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Union

from .errors import InvalidContentsError


class Role(str, Enum):
    """Roles a turn can carry on the caller side."""

    USER = "user"
    MODEL = "model"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class Part:
    """One fragment of a turn.

    ``text`` is ``None`` when the part has no text field at all (inline data,
    function calls and the like). Such parts are carried but never sent over
    the wire. An empty string is a present, empty text.
    """

    text: str | None = None
    # MappingProxyType is unhashable, so parts hash by text alone.
    data: Mapping[str, Any] | None = field(default=None, hash=False)

    def __post_init__(self) -> None:
        if self.text is not None and not isinstance(self.text, str):
            msg = "part text must be a string when present"
            raise InvalidContentsError(msg)
        if self.data is not None:
            if not isinstance(self.data, Mapping):
                msg = "part data must be a mapping when present"
                raise InvalidContentsError(msg)
            object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Part":
        if "text" in payload:
            extra = {key: value for key, value in payload.items() if key != "text"}
            return cls(text=payload["text"], data=extra or None)
        return cls(data=payload)

    @property
    def has_text(self) -> bool:
        return self.text is not None


@dataclass(frozen=True, slots=True)
class Content:
    """A single role-tagged turn made of ordered parts."""

    role: Role
    parts: tuple[Part, ...] = ()

    def __post_init__(self) -> None:
        try:
            role = Role(self.role)
        except ValueError as exc:
            msg = f"unsupported role '{self.role}'"
            raise InvalidContentsError(msg) from exc
        object.__setattr__(self, "role", role)

        if not isinstance(self.parts, Sequence) or isinstance(
            self.parts, (str, bytes, bytearray)
        ):
            msg = "content parts must be a sequence of Part instances"
            raise InvalidContentsError(msg)
        object.__setattr__(self, "parts", tuple(_coerce_part(part) for part in self.parts))

    @classmethod
    def from_text(cls, text: str, *, role: Role | str = Role.USER) -> "Content":
        return cls(role=Role(role), parts=(Part(text=text),))

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Content":
        return cls(role=payload.get("role", Role.USER), parts=payload.get("parts") or ())

    def text_parts(self) -> list[str]:
        """Return the text of every part that has one, in order."""

        return [part.text for part in self.parts if part.text is not None]


ContentsInput = Union[str, Content, Mapping[str, Any], Sequence[Union[Content, Mapping[str, Any]]]]
SystemInstruction = Union[str, Part, Content, Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class GenerateContentConfig:
    """Sampling options and system instruction forwarded with a request."""

    temperature: float | None = None
    max_output_tokens: int | None = None
    top_p: float | None = None
    system_instruction: SystemInstruction | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "GenerateContentConfig":
        """Build a config from SDK-style keys (camelCase or snake_case)."""

        return cls(
            temperature=payload.get("temperature"),
            max_output_tokens=_first_present(payload, "maxOutputTokens", "max_output_tokens"),
            top_p=_first_present(payload, "topP", "top_p"),
            system_instruction=_first_present(
                payload, "systemInstruction", "system_instruction"
            ),
        )


@dataclass(frozen=True, slots=True)
class GenerateContentParameters:
    """A content generation request as issued by the caller.

    ``model`` is accepted for interface compatibility; generators send the
    model they were configured with.
    """

    contents: ContentsInput
    config: GenerateContentConfig | None = None
    model: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.config, Mapping):
            object.__setattr__(self, "config", GenerateContentConfig.from_mapping(self.config))


@dataclass(frozen=True, slots=True)
class CountTokensParameters:
    contents: ContentsInput
    model: str | None = None


@dataclass(frozen=True, slots=True)
class EmbedContentParameters:
    contents: ContentsInput
    model: str | None = None


def normalize_contents(contents: Any) -> tuple[Content, ...]:
    """Normalize the three accepted ``contents`` shapes into ordered turns.

    A string becomes a single user turn, a single turn (or turn mapping) is
    wrapped, and a list or tuple of turns keeps its order.
    """

    if isinstance(contents, str):
        return (Content.from_text(contents),)

    if isinstance(contents, (Content, Mapping)):
        return (_coerce_content(contents),)

    if isinstance(contents, (list, tuple)):
        return tuple(_coerce_content(item, index=index) for index, item in enumerate(contents))

    msg = f"unsupported contents type {type(contents).__name__}"
    raise InvalidContentsError(msg)


def _coerce_content(item: Any, *, index: int | None = None) -> Content:
    if isinstance(item, Content):
        return item
    if isinstance(item, Mapping):
        return Content.from_mapping(item)

    where = "contents" if index is None else f"contents[{index}]"
    msg = f"{where} must be a Content or mapping, got {type(item).__name__}"
    raise InvalidContentsError(msg)


def _coerce_part(part: Any) -> Part:
    if isinstance(part, Part):
        return part
    if isinstance(part, Mapping):
        return Part.from_mapping(part)
    if isinstance(part, str):
        return Part(text=part)

    msg = f"unsupported part type {type(part).__name__}"
    raise InvalidContentsError(msg)


def _first_present(payload: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in payload:
            return payload[key]
    return None


__all__ = [
    "Content",
    "ContentsInput",
    "CountTokensParameters",
    "EmbedContentParameters",
    "GenerateContentConfig",
    "GenerateContentParameters",
    "Part",
    "Role",
    "SystemInstruction",
    "normalize_contents",
]
