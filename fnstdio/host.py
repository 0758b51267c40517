"""Caller-side helpers for hosts that run the adapter as a child process."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import unquote

from pydantic import ValidationError

from fnstdio.errors import ParseError
from fnstdio.schemas import InvocationOutput, compact_json_dumps

CALL_PREFIX = "/call/"


def split_call_url(url: str, *, prefix: str = CALL_PREFIX) -> tuple[str, str, dict[str, str]]:
    """Split `/call/<function>/<endpoint>?k=v&...` into its three parts.

    Returns empty strings and an empty query when there is no endpoint segment.
    """

    if url.startswith(prefix):
        url = url[len(prefix) :]
    function, slash, rest = url.partition("/")
    if not slash:
        return "", "", {}

    endpoint, _, raw_query = rest.partition("?")
    query: dict[str, str] = {}
    for part in raw_query.split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        query[unquote(key)] = unquote(value)
    return function, endpoint, query


def encode_invocation_args(
    endpoint: str, query: Any, method: str, headers: dict[str, Any]
) -> list[str]:
    return [endpoint, compact_json_dumps(query), method, compact_json_dumps(headers)]


def decode_output(stdout_text: str) -> InvocationOutput:
    # Only the last line is the output object; earlier lines are handler prints.
    lines = [line for line in stdout_text.splitlines() if line.strip()]
    if not lines:
        raise ParseError("adapter produced no output", source="output")
    try:
        return InvocationOutput.from_json(lines[-1])
    except ValidationError as exc:
        raise ParseError(str(exc), source="output") from exc


def output_body_json(output: InvocationOutput) -> Any:
    try:
        return json.loads(output.body)
    except json.JSONDecodeError as exc:
        raise ParseError(str(exc), source="output.body") from exc
