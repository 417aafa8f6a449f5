"""Handler-facing request context.

Function handlers never see the host context directly. They get a
``FunctionContext`` built from it::

    async def on_request(context):
        context.request        # Request (after any override)
        context.env            # bindings
        context.params         # {"slug": "a"} / {"rest": ["a", "b"]}
        context.data           # SharedStore, also reachable as context.locals
        context.wait_until(c)  # background work, not awaited here
        return await context.next()   # middleware only

Derived contexts (a different ``next`` per chain link, a replacement
request) are copies made with ``dataclasses.replace``.
"""

import secrets
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from warren.functions.protocol import HostContext
from warren.http.request import Request

# Reserved per-request storage keys
TRACE_ID_KEY = "__trace_id__"
OVERRIDE_REQUEST_KEY = "__override_request__"
MATERIALIZED_RESPONSE_KEY = "__mutable_response__"

ParamValue: TypeAlias = str | list[str]
Continuation: TypeAlias = Callable[..., Awaitable[Any]]


class SharedStore:
    """Per-request key/value storage shared by every chain link.

    A view over the host context's own storage, so values set here are
    visible to host-level middleware and the other way round.
    ``delete`` stores ``None`` instead of removing the key.
    """

    __slots__ = ("_host",)

    def __init__(self, host: HostContext) -> None:
        self._host = host

    def get(self, key: str, default: Any = None) -> Any:
        value = self._host.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        self._host.set(key, value)

    def has(self, key: str) -> bool:
        return self._host.get(key) is not None

    def delete(self, key: str) -> None:
        self._host.set(key, None)

    def __repr__(self) -> str:
        return "<SharedStore>"


def ensure_trace_id(store: SharedStore) -> str:
    """Return the request's trace id, generating it on first access."""
    trace_id = store.get(TRACE_ID_KEY)
    if not trace_id:
        trace_id = secrets.token_hex(4)
        store.set(TRACE_ID_KEY, trace_id)
    return trace_id


@dataclass(frozen=True, slots=True)
class FunctionContext:
    """What a function handler receives.

    Attributes:
        request: The request, or the pending override if an earlier link
            replaced it.
        env: Environment bindings.
        params: Route parameters. Names listed as array parameters are
            always lists, possibly empty.
        data: The per-request ``SharedStore``.
        wait_until: Registers an awaitable with the host's background
            task runner.
        next: The continuation. ``None`` outside middleware chains.
    """

    request: Request
    env: Mapping[str, Any]
    params: dict[str, ParamValue]
    data: SharedStore
    wait_until: Callable[[Awaitable[Any]], None]
    next: Continuation | None = None
    trace_id: str = field(default="", compare=False)

    @property
    def locals(self) -> SharedStore:
        """Alias of ``data``."""
        return self.data


def resolve_params(
    raw: Mapping[str, Any], array_params: Iterable[str] = ()
) -> dict[str, ParamValue]:
    """Copy router params, turning every array parameter into a list.

    ``"a/b/c"`` becomes ``["a", "b", "c"]``; a missing array parameter
    becomes ``[]``.
    """
    params: dict[str, ParamValue] = dict(raw)
    for name in array_params:
        value = params.get(name)
        if isinstance(value, list):
            continue
        if isinstance(value, tuple):
            params[name] = list(value)
        elif isinstance(value, str):
            params[name] = [piece for piece in value.split("/") if piece]
        elif value is None:
            params[name] = []
    return params


def make_context(
    host: HostContext,
    array_params: Iterable[str] = (),
    *,
    next: Continuation | None = None,
) -> FunctionContext:
    """Build the handler-facing context for the current request."""
    store = SharedStore(host)
    trace_id = ensure_trace_id(store)

    request = host.req.raw
    override = store.get(OVERRIDE_REQUEST_KEY)
    if override is not None:
        request = override.clone()

    return FunctionContext(
        request=request,
        env=host.env if host.env is not None else {},
        params=resolve_params(host.req.param() or {}, array_params),
        data=store,
        wait_until=host.execution_ctx.wait_until,
        next=next,
        trace_id=trace_id,
    )
