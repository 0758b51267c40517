from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import IO, Any

from fnstdio.errors import ParseError
from fnstdio.schemas import PROTOCOL_HTTP

logger = logging.getLogger(__name__)


class RequestBody:
    """Lazy access to the request body carried on the input stream.

    The stream is drained to EOF on the first `text()` call and the decoded
    text is cached, so later calls (and `json()`) see the same content.
    """

    def __init__(self, raw: IO[Any] | None, *, encoding: str = "utf-8") -> None:
        self.raw = raw
        self._encoding = encoding
        self._text: str | None = None
        self._lock = asyncio.Lock()

    def _read_all(self) -> str:
        if self.raw is None:
            return ""
        chunks: list[bytes | str] = []
        while True:
            chunk = self.raw.read(65536)
            if not chunk:
                break
            chunks.append(chunk)
        if not chunks:
            return ""
        if isinstance(chunks[0], bytes):
            return b"".join(chunks).decode(self._encoding)  # type: ignore[arg-type]
        return "".join(chunks)  # type: ignore[arg-type]

    async def text(self) -> str:
        async with self._lock:
            if self._text is None:
                self._text = await asyncio.to_thread(self._read_all)
                logger.debug("read %d characters of request body", len(self._text))
        return self._text

    async def json(self) -> Any:
        text = await self.text()
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ParseError(str(exc), source="body") from exc


@dataclass(frozen=True, slots=True)
class Request:
    name: str
    query: Any
    method: str
    headers: dict[str, Any]
    body: RequestBody = field(compare=False, repr=False)
    protocol: str = PROTOCOL_HTTP

    @property
    def path(self) -> str:
        return f"/{self.name}"

    def header(self, name: str, default: Any = None) -> Any:
        if name in self.headers:
            return self.headers[name]
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default


def _parse_json_param(raw: str, *, source: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        raise ParseError(f"invalid JSON: {exc}", source=source) from exc


def build_request(
    name: str,
    query: str,
    method: str,
    headers: str,
    *,
    stream: IO[Any] | None = None,
) -> Request:
    if not name:
        raise ParseError("must be non-empty", source="name")
    if not method:
        raise ParseError("must be non-empty", source="method")

    parsed_query = _parse_json_param(query, source="query")
    parsed_headers = _parse_json_param(headers, source="headers")
    if not isinstance(parsed_headers, dict):
        raise ParseError("must decode to a JSON object", source="headers")

    return Request(
        name=name,
        query=parsed_query,
        method=method.upper(),
        headers=parsed_headers,
        body=RequestBody(stream),
    )
