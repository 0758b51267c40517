from __future__ import annotations

import importlib
import importlib.util
import inspect
import logging
import sys
from collections.abc import Awaitable, Callable, Iterator, Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

import yaml

from fnstdio.errors import HandlerLoadError
from fnstdio.request import Request
from fnstdio.response import Response

logger = logging.getLogger(__name__)

Handler = Callable[[Request, Response], Awaitable[Any] | None]


class HandlerRegistry:
    """Name → handler table injected into the dispatcher.

    Lookup is exact and case-sensitive. When a name is registered twice the
    first registration wins and the later one is ignored with a warning.
    """

    def __init__(self, handlers: Mapping[str, Handler] | None = None) -> None:
        self._handlers: dict[str, Handler] = {}
        for name, handler in (handlers or {}).items():
            self.add(name, handler)

    def add(self, name: str, handler: Handler) -> bool:
        if not isinstance(name, str) or not name:
            raise ValueError("handler name must be a non-empty string")
        if not callable(handler):
            raise TypeError(f"handler {name!r} is not callable")
        if name in self._handlers:
            logger.warning("duplicate handler %r ignored; first registration wins", name)
            return False
        self._handlers[name] = handler
        return True

    def register(self, name: str | None = None) -> Callable[[Handler], Handler]:
        def decorator(fn: Handler) -> Handler:
            self.add(name or fn.__name__, fn)
            return fn

        return decorator

    def resolve(self, name: str) -> Handler | None:
        return self._handlers.get(name)

    def names(self) -> list[str]:
        return list(self._handlers)

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


def load_module_handlers(module: ModuleType) -> HandlerRegistry:
    # A module may export an explicit HANDLERS mapping; otherwise every public
    # function defined in the module itself is a handler.
    exported = getattr(module, "HANDLERS", None)
    if exported is not None:
        if not isinstance(exported, Mapping):
            raise HandlerLoadError(f"{module.__name__}.HANDLERS must be a mapping")
        try:
            return HandlerRegistry(exported)
        except (TypeError, ValueError) as exc:
            raise HandlerLoadError(f"{module.__name__}.HANDLERS: {exc}") from exc

    registry = HandlerRegistry()
    for name, fn in inspect.getmembers(module, inspect.isfunction):
        if name.startswith("_") or fn.__module__ != module.__name__:
            continue
        registry.add(name, fn)
    return registry


def _import_module(ref: str) -> ModuleType:
    try:
        return importlib.import_module(ref)
    except Exception as exc:
        raise HandlerLoadError(f"cannot import handler module {ref!r}: {exc}") from exc


def _import_file(path: Path) -> ModuleType:
    if not path.exists():
        raise HandlerLoadError(f"handler file not found: {path}")
    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise HandlerLoadError(f"cannot load handler file: {path}")
    module = importlib.util.module_from_spec(spec)
    # Registered before execution so dataclasses and pickling can find it.
    sys.modules[spec.name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(spec.name, None)
        raise HandlerLoadError(f"cannot load handler file {path}: {exc}") from exc
    return module


def _resolve_target(target: str) -> Handler:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        raise HandlerLoadError(f"handler target must look like 'module:function', got {target!r}")
    obj: Any = _import_module(module_name)
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise HandlerLoadError(f"{target!r}: {exc}") from exc
    return obj


def load_manifest(path: Path) -> HandlerRegistry:
    """Build a registry from a YAML manifest.

    handlers:
      ping: my_app.handlers:ping
      echo: my_app.handlers:echo
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise HandlerLoadError(f"cannot read manifest {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise HandlerLoadError("manifest must be a YAML mapping")

    raw = data.get("handlers")
    if not isinstance(raw, dict) or not raw:
        raise HandlerLoadError("manifest.handlers must be a non-empty mapping")

    registry = HandlerRegistry()
    for name, target in raw.items():
        if not isinstance(target, str):
            raise HandlerLoadError(f"handler {name!r} target must be a string")
        try:
            registry.add(str(name), _resolve_target(target.strip()))
        except (TypeError, ValueError) as exc:
            raise HandlerLoadError(f"manifest {path}: {exc}") from exc
    return registry


def load_registry(ref: str) -> HandlerRegistry:
    ref = str(ref or "").strip()
    if not ref:
        raise HandlerLoadError("no handler source configured")

    # Console scripts do not put the working directory on sys.path, but handler
    # modules are looked up beside the process as under `python -m`.
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    path = Path(ref)
    if path.suffix in (".yaml", ".yml"):
        registry = load_manifest(path)
    elif path.suffix == ".py":
        registry = load_module_handlers(_import_file(path))
    else:
        registry = load_module_handlers(_import_module(ref))

    logger.debug("loaded %d handler(s) from %s", len(registry), ref)
    return registry
