from __future__ import annotations

import argparse
import logging
import sys

from fnstdio.config import configure_logging, load_settings
from fnstdio.dispatcher import emit, internal_error, run
from fnstdio.errors import HandlerLoadError
from fnstdio.registry import HandlerRegistry, load_registry

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fnstdio",
        description="Invoke one named handler with an HTTP-style request read from argv and stdin.",
    )
    parser.add_argument("name", help="handler name")
    parser.add_argument("query", help="query parameters as JSON")
    parser.add_argument("method", help="HTTP method, case-insensitive")
    parser.add_argument("headers", help="request headers as a JSON object")
    return parser


def main(argv: list[str] | None = None, *, registry: HandlerRegistry | None = None) -> int:
    args = _parser().parse_args(argv)

    settings = load_settings()
    configure_logging(settings.log_level)

    if registry is None:
        try:
            registry = load_registry(settings.handlers)
        except HandlerLoadError as exc:
            logger.error("%s", exc)
            emit(internal_error(), out=sys.stdout)
            return 1

    return run(
        [args.name, args.query, args.method, args.headers],
        registry=registry,
        stdin=getattr(sys.stdin, "buffer", sys.stdin),
        stdout=sys.stdout,
    )
