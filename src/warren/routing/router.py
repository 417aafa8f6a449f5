"""Pattern router with registration-order dispatch.

Every registered callable — subtree middleware from ``use()`` and exact
handlers from ``all()`` / ``get()`` / ... — lives in one ordered list.
A request runs every entry whose pattern and method match, in the order
they were registered, each one reaching the next through ``next()``.
Registration is closed once the router is frozen.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from warren._internal.invoke import invoke
from warren._internal.types import HostHandler
from warren.errors import ConfigurationError, NotFound
from warren.http.request import Request
from warren.http.response import Response
from warren.routing.context import Context, ExecutionContext
from warren.routing.pattern import PathPattern, compile_pattern
from warren.server.errors import http_error_response

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")

# Method marker for entries that match every verb
ANY_METHOD = "ALL"


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """One registered callable.

    ``kind`` is ``"middleware"`` for ``use()`` registrations and
    ``"handler"`` for everything else.
    """

    kind: str
    method: str
    pattern: PathPattern
    handler: HostHandler

    def accepts(self, method: str) -> bool:
        return self.method == ANY_METHOD or self.method == method


class Router:
    """Ordered pattern router.

    Usage::

        router = Router()
        router.use("/*", timing)
        router.get("/users/:id", show_user)
        router.freeze()
        response = await router.dispatch(Request.build("GET", "/users/42"))

    Registered callables are called as ``fn(context, next)`` and may
    return a ``Response`` (which becomes ``context.res``) or ``None``.
    ``next()`` runs the rest of the matching entries and returns the
    in-progress response.
    """

    __slots__ = ("_entries", "_frozen")

    def __init__(self) -> None:
        self._entries: list[RouteEntry] = []
        self._frozen = False

    # -- Registration --

    def use(self, pattern: str, handler: HostHandler) -> None:
        """Register middleware for every method on *pattern*."""
        self._add("middleware", ANY_METHOD, pattern, handler)

    def all(self, pattern: str, handler: HostHandler) -> None:
        """Register a handler for every method on *pattern*."""
        self._add("handler", ANY_METHOD, pattern, handler)

    def on(self, method: str, pattern: str, handler: HostHandler) -> None:
        method = method.upper()
        if method not in HTTP_METHODS:
            msg = f"Unsupported HTTP method {method!r} for route {pattern!r}"
            raise ConfigurationError(msg)
        self._add("handler", method, pattern, handler)

    def get(self, pattern: str, handler: HostHandler) -> None:
        self.on("GET", pattern, handler)

    def post(self, pattern: str, handler: HostHandler) -> None:
        self.on("POST", pattern, handler)

    def put(self, pattern: str, handler: HostHandler) -> None:
        self.on("PUT", pattern, handler)

    def delete(self, pattern: str, handler: HostHandler) -> None:
        self.on("DELETE", pattern, handler)

    def patch(self, pattern: str, handler: HostHandler) -> None:
        self.on("PATCH", pattern, handler)

    def head(self, pattern: str, handler: HostHandler) -> None:
        self.on("HEAD", pattern, handler)

    def options(self, pattern: str, handler: HostHandler) -> None:
        self.on("OPTIONS", pattern, handler)

    def _add(self, kind: str, method: str, pattern: str, handler: HostHandler) -> None:
        if self._frozen:
            msg = "Cannot register routes after the router is frozen."
            raise ConfigurationError(msg)
        self._entries.append(
            RouteEntry(kind=kind, method=method, pattern=compile_pattern(pattern), handler=handler)
        )

    def freeze(self) -> None:
        """Close registration. The entry list is read-only afterwards."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def entries(self) -> tuple[RouteEntry, ...]:
        return tuple(self._entries)

    # -- Dispatch --

    def match(self, method: str, path: str) -> list[tuple[RouteEntry, dict[str, str]]]:
        """Every entry matching *method* and *path*, in registration order."""
        method = method.upper()
        matched: list[tuple[RouteEntry, dict[str, str]]] = []
        for entry in self._entries:
            if not entry.accepts(method):
                continue
            params = entry.pattern.match(path)
            if params is not None:
                matched.append((entry, params))
        return matched

    async def dispatch(
        self,
        request: Request,
        *,
        env: Mapping[str, Any] | None = None,
        execution_ctx: ExecutionContext | None = None,
    ) -> Response:
        """Run the matching entries for *request* and return the final response.

        When nothing produces a response, the innermost ``next()`` sets a
        404 so outer middleware still sees (and can decorate) it.
        """
        context = Context(request, env=env, execution_ctx=execution_ctx)
        matched = self.match(request.method, request.path)
        reached = -1

        async def run(index: int) -> Response | None:
            nonlocal reached
            if index <= reached:
                msg = "next() called multiple times"
                raise RuntimeError(msg)
            reached = index

            if index >= len(matched):
                if context.res is None:
                    context.res = _not_found(request)
                return context.res

            entry, params = matched[index]
            context.req.bind(params)

            async def next_() -> Response | None:
                try:
                    return await run(index + 1)
                finally:
                    context.req.bind(params)

            result = await invoke(entry.handler, context, next_)
            if result is not None:
                if not isinstance(result, Response):
                    msg = (
                        f"Handler for {entry.pattern.source!r} returned "
                        f"{type(result).__name__}; expected Response or None"
                    )
                    raise TypeError(msg)
                context.res = result
            return context.res

        await run(0)
        if context.res is None:
            context.res = _not_found(request)
        return context.res


def _not_found(request: Request) -> Response:
    return http_error_response(NotFound(f"No route matches {request.method} {request.path!r}"))
