from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

DEFAULT_HANDLERS = "handlers"
DEFAULT_LOG_LEVEL = "WARNING"


def load_env() -> None:
    # The adapter runs beside its handlers, so `.env` is searched from CWD up.
    env_path = find_dotenv(usecwd=True)
    if env_path:
        load_dotenv(env_path)


@dataclass(frozen=True)
class AdapterSettings:
    handlers: str = DEFAULT_HANDLERS
    log_level: str = DEFAULT_LOG_LEVEL


def load_settings() -> AdapterSettings:
    load_env()
    return AdapterSettings(
        handlers=(os.getenv("FNSTDIO_HANDLERS") or DEFAULT_HANDLERS).strip(),
        log_level=(os.getenv("FNSTDIO_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    # stdout carries the output object, so logs only ever go to stderr.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger("fnstdio")
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level.upper(), logging.WARNING))
