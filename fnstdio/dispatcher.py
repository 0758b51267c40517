from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
import sys
from typing import IO, Any

from fnstdio.errors import ParseError
from fnstdio.registry import HandlerRegistry
from fnstdio.request import Request, build_request
from fnstdio.response import Response
from fnstdio.schemas import InvocationOutput

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Function not found"


async def dispatch(
    request: Request, response: Response, *, registry: HandlerRegistry
) -> InvocationOutput:
    handler = registry.resolve(request.name)
    if handler is None:
        logger.info("no handler named %r", request.name)
        response.code = 404
        response.write(NOT_FOUND_MESSAGE)
        return response.snapshot()

    result = handler(request, response)
    if inspect.isawaitable(result):
        await result

    if not response.finished:
        logger.warning("handler %r returned without finishing the response", request.name)
    return response.snapshot()


def _error_output(code: int, message: str) -> InvocationOutput:
    response = Response()
    response.code = code
    response.write(message)
    return response.snapshot()


def bad_request(exc: ParseError) -> InvocationOutput:
    return _error_output(400, f"Bad Request: {exc}")


def internal_error() -> InvocationOutput:
    return _error_output(500, "Internal Server Error")


def emit(output: InvocationOutput, *, out: IO[str]) -> None:
    out.write(output.to_json())
    out.flush()


def invoke(
    request: Request,
    *,
    registry: HandlerRegistry,
    out: IO[str],
    response: Response | None = None,
) -> InvocationOutput:
    """Run one handler to completion and write its output exactly once."""

    response = response if response is not None else Response()
    try:
        # Handler prints must not interleave with the output object.
        with contextlib.redirect_stdout(sys.stderr):
            output = asyncio.run(dispatch(request, response, registry=registry))
        payload = output.to_json()
    except ParseError as exc:
        logger.warning("handler %r rejected input: %s", request.name, exc)
        output = bad_request(exc)
        payload = output.to_json()
    except Exception:
        # Also covers a response whose code or headers cannot be serialized.
        logger.exception("handler %r failed", request.name)
        output = internal_error()
        payload = output.to_json()

    out.write(payload)
    out.flush()
    return output


def run(
    argv: list[str],
    *,
    registry: HandlerRegistry,
    stdin: IO[Any] | None,
    stdout: IO[str],
) -> int:
    name, query, method, headers = argv
    try:
        request = build_request(name, query, method, headers, stream=stdin)
    except ParseError as exc:
        logger.warning("invalid invocation parameters: %s", exc)
        emit(bad_request(exc), out=stdout)
        return 0

    invoke(request, registry=registry, out=stdout)
    return 0
