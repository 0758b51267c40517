from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from fnstdio.errors import TerminalStateError
from fnstdio.schemas import (
    PROTOCOL_HTTP,
    InvocationOutput,
    ValueKind,
    compact_json_dumps,
    value_kind,
)

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_TEXT = "plain/text"


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8"))


class Response:
    """Response accumulator handed to a handler.

    Headers are replaced wholesale by every `set` call. Exactly one of `send`
    or `write` finishes the response; after that every mutator raises
    `TerminalStateError`. `code` is not validated but is frozen with the rest
    of the response once finished.
    """

    def __init__(self) -> None:
        self.protocol = PROTOCOL_HTTP
        self._code = 200
        self.headers: dict[str, Any] | None = None
        self.body: str = ""
        self.finished = False

    def _ensure_open(self) -> None:
        if self.finished:
            raise TerminalStateError()

    @property
    def code(self) -> int:
        return self._code

    @code.setter
    def code(self, value: int) -> None:
        self._ensure_open()
        self._code = value

    def set(self, header: str | Mapping[str, Any], value: str | None = None) -> None:
        self._ensure_open()
        kind = value_kind(header)
        if kind is ValueKind.TEXT:
            if value_kind(value) is not ValueKind.TEXT:
                raise TypeError("header value must be a string when setting a single header")
            self.headers = {header.lower(): value.lower()}  # type: ignore[union-attr]
        elif kind is ValueKind.MAPPING:
            headers = dict(header)  # type: ignore[arg-type]
            if not all(value_kind(k) is ValueKind.TEXT for k in headers):
                raise TypeError("header names must be strings")
            try:
                compact_json_dumps(headers)
            except (TypeError, ValueError) as exc:
                raise TypeError(f"header values must be JSON-serializable: {exc}") from exc
            self.headers = headers
        else:
            raise TypeError(f"set() expects a header name or a mapping, got {type(header).__name__}")

    def _finish(self, body: str, *, content_type: str) -> None:
        self.body = body
        self.set({"content-type": content_type, "content-length": _byte_length(body)})
        self.finished = True

    def send(self, obj: Any) -> None:
        self._ensure_open()
        try:
            body = compact_json_dumps(obj)
        except (TypeError, ValueError) as exc:
            raise TypeError(f"send() expects a JSON-serializable value: {exc}") from exc
        self._finish(body, content_type=CONTENT_TYPE_JSON)

    def write(self, text: str) -> None:
        self._ensure_open()
        if value_kind(text) is not ValueKind.TEXT:
            raise TypeError("text should be a string, use send(obj) for objects")
        self._finish(text, content_type=CONTENT_TYPE_TEXT)

    def snapshot(self) -> InvocationOutput:
        headers = dict(self.headers) if self.headers is not None else None
        return InvocationOutput(code=self.code, headers=headers, body=self.body)
