"""Host-level callables wrapping composed chains.

Each class is registered on the host router and called as
``handler(host, next)``:

- ``GlobalWrapper`` — first ``use("/*")`` entry; stamps the trace header
  on a clone of the materialized response
- ``MiddlewareHandler`` — a ``_middleware`` chain for a subtree
- ``MethodGate`` — a ``MiddlewareHandler`` that only runs for one method
- ``RouteHandler`` — a leaf file's chain for its exact pattern
"""

import logging
from collections.abc import Iterable
from typing import Any

from warren._internal.types import Downstream
from warren.functions.chain import Chain
from warren.functions.context import (
    MATERIALIZED_RESPONSE_KEY,
    SharedStore,
    ensure_trace_id,
    make_context,
)
from warren.functions.protocol import HostContext
from warren.functions.response import (
    clone_with_extras,
    ensure_vary_origin,
    materialize,
    merge_headers,
    normalize,
)
from warren.http.response import Response

logger = logging.getLogger("warren.functions")


class GlobalWrapper:
    """Outermost middleware guaranteeing headers reach the client.

    Whatever inner layers did to ``host.res``, the response returned
    here is a fresh clone of the materialized response (or of the
    downstream result when nothing materialized one) carrying every
    header it held plus the trace header.
    """

    __slots__ = ("debug", "trace_header")

    def __init__(self, trace_header: str, *, debug: bool = False) -> None:
        self.trace_header = trace_header
        self.debug = debug

    async def __call__(self, host: HostContext, next: Downstream) -> Response:
        store = SharedStore(host)
        trace_id = ensure_trace_id(store)
        if self.debug:
            logger.debug(
                "[%s] %s %s", trace_id, host.req.method, host.req.path,
                extra={"trace_id": trace_id},
            )

        result = await next()

        shared = store.get(MATERIALIZED_RESPONSE_KEY)
        if shared is None:
            shared = normalize(result if isinstance(result, Response) else host.res)

        host.header(self.trace_header, trace_id)
        final = clone_with_extras(shared, {self.trace_header: trace_id})
        if self.debug:
            logger.debug(
                "[%s] final %d %s", trace_id, final.status, dict(final.headers.lowered()),
                extra={"trace_id": trace_id},
            )
        return final


class MiddlewareHandler:
    """Runs one ``_middleware`` chain in front of a subtree.

    The chain's final continuation materializes the downstream response.
    When the chain itself produces a result, that result's headers are
    reflected onto the host and merged into the materialized response,
    ``Vary: Origin`` is added, and a fresh clone is returned.
    """

    __slots__ = ("array_params", "chain", "debug", "filepath")

    def __init__(
        self,
        chain: Chain,
        array_params: Iterable[str] = (),
        *,
        filepath: str | None = None,
        debug: bool = False,
    ) -> None:
        self.chain = chain
        self.array_params = frozenset(array_params)
        self.filepath = filepath
        self.debug = debug

    async def __call__(self, host: HostContext, next: Downstream) -> Response:
        context = make_context(host, self.array_params)
        trace_id = context.trace_id
        if self.debug:
            logger.debug(
                "[%s] middleware %s", trace_id, self.filepath, extra={"trace_id": trace_id}
            )

        async def final_next() -> Response:
            return await materialize(host, next)

        result = await self.chain(context, final_next)
        if result is None:
            return await final_next()

        if not isinstance(result, Response):
            result = normalize(result)

        store = SharedStore(host)
        shared = store.get(MATERIALIZED_RESPONSE_KEY)
        if shared is None:
            shared = normalize(result)
            store.set(MATERIALIZED_RESPONSE_KEY, shared)
        elif shared is not result:
            merge_headers(shared, result)
        ensure_vary_origin(shared)

        # Host finalizers may rebuild host.res; staged headers survive that.
        for name in list(shared.headers):
            host.header(name, shared.headers.get_list(name))

        if self.debug:
            logger.debug(
                "[%s] middleware %s returned %d", trace_id, self.filepath, shared.status,
                extra={"trace_id": trace_id},
            )
        return clone_with_extras(shared)


class MethodGate:
    """Runs a middleware handler only for one request method."""

    __slots__ = ("handler", "method")

    def __init__(self, method: str, handler: MiddlewareHandler) -> None:
        self.method = method.upper()
        self.handler = handler

    async def __call__(self, host: HostContext, next: Downstream) -> Any:
        ensure_trace_id(SharedStore(host))
        if host.req.method.upper() == self.method:
            return await self.handler(host, next)
        return await next()


class RouteHandler:
    """Runs a leaf file's chain for its exact pattern.

    ``Response`` results are returned as-is, ``None`` becomes an empty
    204, anything else is normalized.
    """

    __slots__ = ("array_params", "chain", "debug", "filepath")

    def __init__(
        self,
        chain: Chain,
        array_params: Iterable[str] = (),
        *,
        filepath: str | None = None,
        debug: bool = False,
    ) -> None:
        self.chain = chain
        self.array_params = frozenset(array_params)
        self.filepath = filepath
        self.debug = debug

    async def __call__(self, host: HostContext, next: Downstream) -> Response:  # noqa: ARG002
        context = make_context(host, self.array_params)
        if self.debug:
            logger.debug(
                "[%s] route %s", context.trace_id, self.filepath,
                extra={"trace_id": context.trace_id},
            )

        result = await self.chain(context, _no_more_steps)
        if isinstance(result, Response):
            return result
        return normalize(result)


async def _no_more_steps() -> None:
    return None
