"""ASGI handler — translates ASGI scope/messages to warren types.

The only component that touches raw ASGI HTTP messages. Builds a
Request, dispatches it through the router, sends the Response back, and
then runs the deferred work the request registered.
"""

import logging
from collections.abc import Awaitable, Mapping
from typing import Any

import anyio

from warren._internal.asgi import Receive, Scope, Send
from warren.errors import HTTPError
from warren.http.request import Request
from warren.routing.context import ExecutionContext
from warren.routing.router import Router
from warren.server.errors import handle_http_error, handle_internal_error
from warren.server.sender import send_response

logger = logging.getLogger("warren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    env: Mapping[str, Any],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = await Request.from_asgi(scope, receive)
    execution_ctx = ExecutionContext()

    try:
        response = await router.dispatch(request, env=env, execution_ctx=execution_ctx)
    except HTTPError as exc:
        response = handle_http_error(exc, request, debug=debug)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    await send_response(response, send)
    await run_deferred(execution_ctx.drain())


async def run_deferred(pending: list[Awaitable[Any]]) -> None:
    """Run deferred work concurrently. Failures are logged, not raised."""
    if not pending:
        return

    async def _run(work: Awaitable[Any]) -> None:
        try:
            await work
        except Exception:
            logger.exception("deferred task failed")

    async with anyio.create_task_group() as tg:
        for work in pending:
            tg.start_soon(_run, work)
