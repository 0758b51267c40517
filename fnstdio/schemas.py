from __future__ import annotations

import json
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PROTOCOL_HTTP = "http"


class ValueKind(str, Enum):
    TEXT = "text"
    MAPPING = "mapping"
    OTHER = "other"


def value_kind(value: Any) -> ValueKind:
    if isinstance(value, str):
        return ValueKind.TEXT
    if isinstance(value, Mapping):
        return ValueKind.MAPPING
    return ValueKind.OTHER


def compact_json_dumps(obj: Any) -> str:
    # Same shape as JSON.stringify: no whitespace, non-ASCII kept as-is.
    # NaN and Infinity are not JSON, so they are rejected rather than emitted.
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


class InvocationOutput(BaseModel):
    """The single object written to stdout at the end of an invocation."""

    model_config = ConfigDict(extra="forbid")

    code: int = 200
    headers: dict[str, Any] | None = None
    body: str = Field(default="")

    def to_json(self) -> str:
        return compact_json_dumps(self.model_dump(mode="json"))

    @classmethod
    def from_json(cls, text: str) -> InvocationOutput:
        return cls.model_validate_json(text)
