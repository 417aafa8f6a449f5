"""Chain composition for one file's exported handlers.

An export is a single handler or an ordered list of them. The list runs
as linked steps, each reaching the next through a single-use
continuation::

    async def authenticate(context):
        if not context.request.headers.get("authorization"):
            return Response.text_response("unauthorized", status=401)
        # returning None without calling next() moves on by itself

    async def timing(context, next):
        started = time.monotonic()
        response = await next()
        response.headers["X-Time"] = f"{time.monotonic() - started:.3f}"

    on_request = [authenticate, timing]

Step results:

- a non-``None`` return stops the chain and is the chain's result
- ``None`` without calling ``next`` advances to the following step
- ``None`` after calling ``next`` yields whatever ``next`` returned

Calling a step's continuation twice raises ``ChainProtocolError``.
Passing a request to ``next(request)`` replaces the request for every
later step in this chain and for every chain composed after it in the
same request.
"""

import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import replace
from typing import Any, TypeAlias

from warren._internal.invoke import invoke, positional_arity
from warren._internal.types import Handler
from warren.errors import ChainProtocolError
from warren.functions.context import OVERRIDE_REQUEST_KEY, FunctionContext
from warren.http.request import Request

logger = logging.getLogger("warren.functions")

FinalNext: TypeAlias = Callable[[], Awaitable[Any]]


class Chain:
    """A composed, reusable chain. Holds no per-request state."""

    __slots__ = ("debug", "steps")

    def __init__(self, steps: Sequence[tuple[Handler, bool]], *, debug: bool = False) -> None:
        # (handler, takes_next) pairs
        self.steps = tuple(steps)
        self.debug = debug

    def __len__(self) -> int:
        return len(self.steps)

    async def __call__(
        self, root: FunctionContext, final_next: FinalNext | None = None
    ) -> Any:
        steps = self.steps
        debug = self.debug
        max_reached = -1

        async def run_at(index: int, context: FunctionContext) -> Any:
            nonlocal max_reached
            if index <= max_reached:
                raise ChainProtocolError(index)
            max_reached = index

            if index >= len(steps):
                if debug:
                    logger.debug(
                        "[%s] chain finished", context.trace_id,
                        extra={"trace_id": context.trace_id},
                    )
                return await final_next() if final_next is not None else None

            handler, takes_next = steps[index]
            called = False
            downstream: Any = None

            async def step_next(request: Request | None = None) -> Any:
                nonlocal called, downstream
                called = True
                following = context
                if request is not None and request is not context.request:
                    pending = request.clone()
                    context.data.set(OVERRIDE_REQUEST_KEY, pending)
                    following = replace(context, request=pending.clone())
                    if debug:
                        logger.debug(
                            "[%s] step %d replaced the request", context.trace_id, index,
                            extra={"trace_id": context.trace_id},
                        )
                downstream = await run_at(index + 1, following)
                return downstream

            if debug:
                logger.debug(
                    "[%s] enter step %d", context.trace_id, index,
                    extra={"trace_id": context.trace_id},
                )

            step_context = replace(context, next=step_next)
            if takes_next:
                out = await invoke(handler, step_context, step_next)
            else:
                out = await invoke(handler, step_context)

            if out is not None:
                return out
            if not called:
                return await run_at(index + 1, context)
            return downstream

        return await run_at(0, root)


def compose_chain(exported: Any, *, debug: bool = False) -> Chain:
    """Compose a handler or list of handlers into a :class:`Chain`.

    Non-callable list items are dropped. Handlers taking two positional
    arguments are called as ``handler(context, next)``, others as
    ``handler(context)`` with ``context.next`` bound.
    """
    handlers = exported if isinstance(exported, (list, tuple)) else [exported]
    steps = [(fn, positional_arity(fn) >= 2) for fn in handlers if callable(fn)]
    return Chain(steps, debug=debug)
