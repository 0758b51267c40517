from __future__ import annotations

import asyncio
import io
from typing import Any

from fnstdio.request import Request
from fnstdio.response import Response


class RecordingHandler:
    """Handler that records every call and sends a fixed payload."""

    def __init__(self, payload: Any = None) -> None:
        self.payload = {"ok": True} if payload is None else payload
        self.calls: list[tuple[Request, Response]] = []

    def __call__(self, request: Request, response: Response) -> None:
        self.calls.append((request, response))
        response.send(self.payload)


def ping(_request: Request, response: Response) -> None:
    response.send({"pong": True})


async def echo(request: Request, response: Response) -> None:
    text = await request.body.text()
    await asyncio.sleep(0)
    response.write(text)


async def echo_json(request: Request, response: Response) -> None:
    data = await request.body.json()
    response.send({"received": data, "method": request.method, "query": request.query})


def silent(_request: Request, _response: Response) -> None:
    return None


def boom(_request: Request, _response: Response) -> None:
    raise RuntimeError("boom")


class ChunkedStream(io.RawIOBase):
    """Binary stream that hands out its payload a few bytes at a time."""

    def __init__(self, payload: bytes, *, chunk_size: int = 3) -> None:
        self._payload = payload
        self._pos = 0
        self._chunk_size = chunk_size
        self.reads = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        self.reads += 1
        end = self._pos + self._chunk_size
        chunk = self._payload[self._pos : end]
        self._pos += len(chunk)
        return chunk
