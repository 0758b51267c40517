from __future__ import annotations

from fnstdio.dispatcher import dispatch, invoke, run
from fnstdio.errors import FnStdioError, HandlerLoadError, ParseError, TerminalStateError
from fnstdio.registry import Handler, HandlerRegistry, load_manifest, load_module_handlers, load_registry
from fnstdio.request import Request, RequestBody, build_request
from fnstdio.response import Response
from fnstdio.schemas import InvocationOutput, ValueKind, value_kind

__all__ = [
    "__version__",
    # Request / response
    "Request",
    "RequestBody",
    "build_request",
    "Response",
    "InvocationOutput",
    "ValueKind",
    "value_kind",
    # Dispatch
    "dispatch",
    "invoke",
    "run",
    # Registry
    "Handler",
    "HandlerRegistry",
    "load_manifest",
    "load_module_handlers",
    "load_registry",
    # Errors
    "FnStdioError",
    "HandlerLoadError",
    "ParseError",
    "TerminalStateError",
]

__version__ = "0.1.0"
