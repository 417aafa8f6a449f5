"""Warren application class.

Serves a functions directory over ASGI. Loading (discovery, compilation,
registration) happens once, on ASGI lifespan startup or the first
request, whichever comes first. The router is frozen afterwards.
"""

import inspect
import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import anyio

from warren._internal.asgi import Receive, Scope, Send
from warren.config import AppConfig, FunctionsConfig
from warren.functions.discovery import discover_modules
from warren.functions.loader import load_functions
from warren.functions.types import Registration
from warren.http.request import Request
from warren.http.response import Response
from warren.routing.context import ExecutionContext
from warren.routing.router import Router
from warren.server.handler import handle_request, run_deferred

logger = logging.getLogger("warren.server")


class App:
    """The warren application.

    Usage::

        app = App(AppConfig(functions_dir="functions"))

        # or with an explicit module map (tests, bundled apps)
        app = App(modules={"functions/index.py": module})

    ``App`` is an ASGI callable; serve it with any ASGI server or with
    ``app.run()``.
    """

    __slots__ = (
        "_load_lock",
        "_loaded",
        "_modules",
        "_registrations",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        modules: Mapping[str, Any] | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._modules = modules
        self._router = Router()
        self._registrations: tuple[Registration, ...] = ()
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._loaded = False
        self._load_lock = anyio.Lock()

    # -- Setup --

    @property
    def router(self) -> Router:
        return self._router

    @property
    def registrations(self) -> tuple[Registration, ...]:
        """What loading registered, in order. Empty until loaded."""
        return self._registrations

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook, run after loading."""
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook."""
        self._shutdown_hooks.append(func)
        return func

    def functions_config(self) -> FunctionsConfig:
        """The loader configuration this app will use."""
        base_dir = Path(self.config.functions_dir).as_posix()
        modules = self._modules
        if modules is None:
            modules = discover_modules(self.config.functions_dir)
        return FunctionsConfig(
            modules=modules,
            base_dir=base_dir,
            debug=self.config.debug,
            trace_header=self.config.trace_header,
        )

    async def load(self) -> tuple[Registration, ...]:
        """Load and register the functions directory once; freeze the router."""
        if self._loaded:
            return self._registrations
        async with self._load_lock:
            if self._loaded:
                return self._registrations
            self._registrations = await load_functions(self._router, self.functions_config())
            self._router.freeze()
            self._loaded = True
            logger.debug("loaded %d registrations", len(self._registrations))
        return self._registrations

    # -- Requests --

    async def fetch(self, request: Request) -> Response:
        """Dispatch *request* in-process and run its deferred work.

        Errors propagate; the ASGI path turns them into error responses.
        """
        await self.load()
        execution_ctx = ExecutionContext()
        response = await self._router.dispatch(
            request, env=self.config.env, execution_ctx=execution_ctx
        )
        await run_deferred(execution_ctx.drain())
        return response

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        await self.load()
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            env=self.config.env,
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Loads the functions directory at startup so configuration errors
        fail the server start instead of the first request.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def startup(self) -> None:
        """Load the functions, then run the startup hooks in order."""
        await self.load()
        await self._run_hooks(self._startup_hooks)

    async def shutdown(self) -> None:
        """Run the shutdown hooks in order."""
        await self._run_hooks(self._shutdown_hooks)

    async def _run_hooks(self, hooks: list[Callable[..., Any]]) -> None:
        for hook in hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    # -- Serving --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with the pounce ASGI server."""
        from warren.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
        )
