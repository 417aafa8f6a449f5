"""Per-request host context.

One ``Context`` is created by ``Router.dispatch`` for every request and
handed to each matching registered callable as ``fn(context, next)``.
It carries:

- ``req`` — the inbound request plus the parameters captured by the
  pattern of the callable currently running
- ``env`` — bindings shared by all requests (read-only by convention)
- ``get`` / ``set`` — per-request key/value storage
- ``res`` — the in-progress response, ``None`` until something sets it
- ``header()`` — header staging that survives later ``res`` replacement
- ``execution_ctx`` — fire-and-forget background work registration
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Mapping, Sequence
from typing import Any

from warren.http.request import Request
from warren.http.response import Response


class HostRequest:
    """The inbound request as seen by a registered callable."""

    __slots__ = ("_params", "raw")

    def __init__(self, raw: Request) -> None:
        self.raw = raw
        self._params: dict[str, str] = {}

    @property
    def method(self) -> str:
        return self.raw.method

    @property
    def path(self) -> str:
        return self.raw.path

    def param(self, name: str | None = None) -> Any:
        """All captured parameters, or the one called *name*."""
        if name is None:
            return dict(self._params)
        return self._params.get(name)

    def bind(self, params: Mapping[str, str]) -> None:
        """Point ``param()`` at the captures of the callable about to run."""
        self._params = dict(params)


class ExecutionContext:
    """Collects deferred work registered during a request.

    The ASGI application runs the collected awaitables after the
    response has been sent. Nothing here awaits them.
    """

    __slots__ = ("_pending",)

    def __init__(self) -> None:
        self._pending: list[Awaitable[Any]] = []

    def wait_until(self, work: Awaitable[Any]) -> None:
        if not inspect.isawaitable(work):
            msg = f"wait_until() expects an awaitable, got {type(work).__name__}"
            raise TypeError(msg)
        self._pending.append(work)

    def drain(self) -> list[Awaitable[Any]]:
        """Return and forget everything registered so far."""
        pending, self._pending = self._pending, []
        return pending


class Context:
    """Host-side per-request state. Never shared between requests."""

    __slots__ = ("_res", "_staged_headers", "_vars", "env", "execution_ctx", "req")

    def __init__(
        self,
        request: Request,
        *,
        env: Mapping[str, Any] | None = None,
        execution_ctx: ExecutionContext | None = None,
    ) -> None:
        self.req = HostRequest(request)
        self.env: Mapping[str, Any] = env if env is not None else {}
        self.execution_ctx = execution_ctx or ExecutionContext()
        self._vars: dict[str, Any] = {}
        self._res: Response | None = None
        self._staged_headers: dict[str, tuple[str, list[str]]] = {}

    # -- Storage --

    def get(self, key: str) -> Any:
        return self._vars.get(key)

    def set(self, key: str, value: Any) -> None:
        self._vars[key] = value

    # -- Response --

    @property
    def res(self) -> Response | None:
        """The in-progress response."""
        return self._res

    @res.setter
    def res(self, response: Response | None) -> None:
        # Staged headers are re-applied to whatever response replaces the
        # current one.
        if response is not None:
            for name, values in self._staged_headers.values():
                _apply_header(response, name, values)
        self._res = response

    @property
    def finalized(self) -> bool:
        return self._res is not None

    def header(self, name: str, value: str | Sequence[str] | None) -> None:
        """Stage a header; ``None`` removes it.

        A sequence stages every value, as multiple header lines.
        """
        if value is None:
            self._staged_headers.pop(name.lower(), None)
            if self._res is not None:
                self._res.headers.pop(name, None)
            return
        values = [value] if isinstance(value, str) else [str(v) for v in value]
        self._staged_headers[name.lower()] = (name, values)
        if self._res is not None:
            _apply_header(self._res, name, values)


def _apply_header(response: Response, name: str, values: list[str]) -> None:
    """Replace every value of *name* with *values*."""
    if not values:
        response.headers.pop(name, None)
        return
    response.headers[name] = values[0]
    for value in values[1:]:
        response.headers.append(name, value)
