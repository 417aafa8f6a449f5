"""Warren exception hierarchy.

Shared across the router, the functions loader, and the ASGI layer so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class WarrenError(Exception):
    """Base for all warren-specific errors."""


class ConfigurationError(WarrenError):
    """Raised when startup configuration is invalid.

    Registration aborts at the first one: nothing past the point of
    failure is added to the router.
    """


class ChainProtocolError(WarrenError):
    """A chain continuation was invoked more than once.

    Fatal to the current request only.
    """

    def __init__(self, position: int) -> None:
        self.position = position
        super().__init__(
            f"continuation invoked more than once (chain position {position})"
        )


@dataclass(frozen=True, slots=True)
class HTTPError(WarrenError):
    """An error that maps directly to an HTTP status code."""

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no registered handler produced a response for the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)
