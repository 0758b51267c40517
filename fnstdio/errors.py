from __future__ import annotations


class FnStdioError(Exception):
    pass


class ParseError(FnStdioError, ValueError):
    def __init__(self, message: str, *, source: str | None = None) -> None:
        self.source = source
        prefix = f"{source}: " if source else ""
        super().__init__(prefix + str(message))


class TerminalStateError(FnStdioError):
    def __init__(self, message: str = "response already finished") -> None:
        super().__init__(message)


class HandlerLoadError(FnStdioError):
    pass
