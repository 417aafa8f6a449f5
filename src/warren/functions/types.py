"""Data models for directory-of-files function routing.

Immutable frozen dataclasses built once at startup by the path compiler
and the loader, read-only for every request afterwards.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """One router pattern compiled from a file path.

    Attributes:
        path: Router pattern, e.g. ``/blog/:slug`` or ``/docs/:rest{.+}``.
        array_params: Parameters resolved to a list of path pieces
            rather than a single string.
    """

    path: str
    array_params: frozenset[str] = frozenset()

    @property
    def depth(self) -> int:
        """Number of segments in ``path`` (``/`` has depth 0)."""
        return len([s for s in self.path.split("/") if s])

    @property
    def subtree(self) -> str:
        """The pattern covering this route and everything below it."""
        return "/*" if self.path == "/" else f"{self.path}/*"


@dataclass(frozen=True, slots=True)
class CompiledPath:
    """Every route a single file path expands to."""

    routes: tuple[CompiledRoute, ...]
    is_middleware: bool = False

    @property
    def paths(self) -> tuple[str, ...]:
        return tuple(route.path for route in self.routes)


@dataclass(frozen=True, slots=True)
class ExportedHandler:
    """A recognised export: the method it serves and the callable(s).

    ``exported`` is a single callable or an ordered sequence of them.
    """

    method: str
    exported: Any


@dataclass(frozen=True, slots=True)
class HandlerModule:
    """A loaded function file, ready for registration."""

    filepath: str
    routes: tuple[CompiledRoute, ...]
    is_middleware: bool
    handlers: tuple[ExportedHandler, ...]

    def handler_for(self, method: str) -> ExportedHandler | None:
        for handler in self.handlers:
            if handler.method == method:
                return handler
        return None


@dataclass(frozen=True, slots=True)
class Registration:
    """One row of the table ``load_functions`` registers on the router.

    ``kind`` is ``"global"``, ``"middleware"``, ``"gate"`` or ``"route"``.
    """

    kind: str
    method: str
    pattern: str
    filepath: str | None = None
