"""Registration of a functions directory on a host router.

``load_functions`` resolves every module, compiles its file path, and
registers it in three ordered passes:

1. one ``use("/*")`` global wrapper ahead of everything else
2. every ``_middleware`` file's ``on_request`` chain at ``<pattern>/*``,
   shallow directories before deep ones
3. method-specific ``_middleware`` exports as method gates, shallow to
   deep, then every leaf file's exports at their exact patterns

The host router runs overlapping subtree middleware in registration
order, so the depth sorts are what make ``/`` middleware run before
``/api`` middleware for ``/api/x``.
"""

import logging
from collections.abc import Mapping
from types import ModuleType
from typing import Any

from warren._internal.invoke import invoke
from warren.config import FunctionsConfig
from warren.errors import ConfigurationError
from warren.functions.chain import compose_chain
from warren.functions.compiler import (
    ALL_METHODS,
    REST_SUFFIX,
    filepath_to_routes,
    method_for_export,
)
from warren.functions.handlers import GlobalWrapper, MethodGate, MiddlewareHandler, RouteHandler
from warren.functions.types import (
    CompiledRoute,
    ExportedHandler,
    HandlerModule,
    Registration,
)

logger = logging.getLogger("warren.functions")

# Attribute used when a module exports no ``on_request*`` names
DEFAULT_EXPORT = "handler"


def _exports(module: Any) -> Mapping[str, Any]:
    if isinstance(module, Mapping):
        return module
    if isinstance(module, ModuleType) or hasattr(module, "__dict__"):
        return vars(module)
    return {}


def _usable(exported: Any) -> bool:
    return callable(exported) or isinstance(exported, (list, tuple))


def collect_handlers(module: Any) -> tuple[ExportedHandler, ...]:
    """Find a module's handler exports, in definition order.

    Falls back to the ``handler`` attribute as an every-method handler
    when no ``on_request*`` export is present.
    """
    exports = _exports(module)
    handlers: list[ExportedHandler] = []
    for name, exported in exports.items():
        method = method_for_export(name)
        if method is None or not _usable(exported):
            continue
        handlers.append(ExportedHandler(method=method, exported=exported))

    if not handlers:
        default = exports.get(DEFAULT_EXPORT)
        if default is not None and _usable(default):
            handlers.append(ExportedHandler(method=ALL_METHODS, exported=default))
    return tuple(handlers)


async def resolve_module(lazy: Any) -> Any:
    """Resolve a lazy module reference.

    Accepts a module (or mapping) directly, or a zero-argument callable
    returning one, synchronously or as an awaitable.
    """
    if isinstance(lazy, (ModuleType, Mapping)):
        return lazy
    if callable(lazy):
        return await invoke(lazy)
    return lazy


def build_module(filepath: str, module: Any, base_dir: str) -> HandlerModule | None:
    """Compile one resolved module; ``None`` if it exports no handlers."""
    handlers = collect_handlers(module)
    if not handlers:
        return None
    compiled = filepath_to_routes(filepath, base_dir)
    return HandlerModule(
        filepath=filepath,
        routes=compiled.routes,
        is_middleware=compiled.is_middleware,
        handlers=handlers,
    )


def subtree_routes(module: HandlerModule) -> tuple[CompiledRoute, ...]:
    """The routes a middleware module is mounted at.

    A widened ``:name{.+}`` route adds nothing under a subtree wildcard
    that its plain ``:name`` sibling doesn't already cover, and mounting
    both would run the middleware twice for one request.
    """
    paths = {route.path for route in module.routes}
    return tuple(
        route
        for route in module.routes
        if not (route.path.endswith(REST_SUFFIX) and route.path[: -len(REST_SUFFIX)] in paths)
    )


async def load_modules(config: FunctionsConfig) -> list[HandlerModule]:
    """Resolve and compile every module in ``config.modules``."""
    modules = config.modules
    if modules is None or not isinstance(modules, Mapping):
        msg = (
            "load_functions() requires a mapping of file path to module. "
            "Pass FunctionsConfig(modules=discover_modules('<functions_dir>'))."
        )
        raise ConfigurationError(msg)

    base_dir = str(config.base_dir).replace("\\", "/").rstrip("/")
    loaded: list[HandlerModule] = []
    for filepath, lazy in modules.items():
        module = await resolve_module(lazy)
        entry = build_module(str(filepath), module, base_dir)
        if entry is None:
            logger.debug("skipping %s: no handler exports", filepath)
            continue
        loaded.append(entry)
    return loaded


def _register_route(
    router: Any, method: str, pattern: str, handler: RouteHandler, filepath: str
) -> None:
    if method == ALL_METHODS:
        router.all(pattern, handler)
        return
    register = getattr(router, method.lower(), None)
    if not callable(register):
        msg = f"Unsupported HTTP method {method!r} on route {pattern!r} for {filepath}"
        raise ConfigurationError(msg)
    register(pattern, handler)


async def load_functions(router: Any, config: FunctionsConfig) -> tuple[Registration, ...]:
    """Register a functions directory on *router*.

    *router* needs ``use``, ``all`` and lower-case per-verb registration
    methods (``get``, ``post``, ...). Returns what was registered, in
    registration order.

    Raises ``ConfigurationError`` when ``config.modules`` is missing or a
    handler's method has no registration method on the router. Nothing
    after the failing registration is added.
    """
    entries = await load_modules(config)
    debug = config.debug
    registrations: list[Registration] = []

    # Pass 0: the global wrapper wraps everything.
    router.use("/*", GlobalWrapper(config.trace_header, debug=debug))
    registrations.append(Registration(kind="global", method=ALL_METHODS, pattern="/*"))

    # Pass 1: every-method middleware, shallow to deep.
    pending: list[tuple[int, str, MiddlewareHandler, str]] = []
    for entry in entries:
        if not entry.is_middleware:
            continue
        every = entry.handler_for(ALL_METHODS)
        if every is None:
            continue
        for route in subtree_routes(entry):
            handler = MiddlewareHandler(
                compose_chain(every.exported, debug=debug),
                route.array_params,
                filepath=entry.filepath,
                debug=debug,
            )
            pending.append((route.depth, route.subtree, handler, entry.filepath))

    pending.sort(key=lambda item: item[0])
    for _depth, pattern, handler, filepath in pending:
        router.use(pattern, handler)
        registrations.append(
            Registration(kind="middleware", method=ALL_METHODS, pattern=pattern, filepath=filepath)
        )
        logger.debug("registered middleware %s from %s", pattern, filepath)

    # Pass 2: method gates, shallow to deep, then leaf routes.
    gates: list[tuple[int, str, str, MethodGate, str]] = []
    for entry in entries:
        if not entry.is_middleware:
            continue
        for route in subtree_routes(entry):
            for exported in entry.handlers:
                if exported.method == ALL_METHODS:
                    continue
                gate = MethodGate(
                    exported.method,
                    MiddlewareHandler(
                        compose_chain(exported.exported, debug=debug),
                        route.array_params,
                        filepath=entry.filepath,
                        debug=debug,
                    ),
                )
                gates.append((route.depth, route.subtree, exported.method, gate, entry.filepath))

    gates.sort(key=lambda item: item[0])
    for _depth, pattern, method, gate, filepath in gates:
        router.use(pattern, gate)
        registrations.append(
            Registration(kind="gate", method=method, pattern=pattern, filepath=filepath)
        )

    for entry in entries:
        if entry.is_middleware:
            continue
        for route in entry.routes:
            for exported in entry.handlers:
                handler = RouteHandler(
                    compose_chain(exported.exported, debug=debug),
                    route.array_params,
                    filepath=entry.filepath,
                    debug=debug,
                )
                _register_route(router, exported.method, route.path, handler, entry.filepath)
                registrations.append(
                    Registration(
                        kind="route",
                        method=exported.method,
                        pattern=route.path,
                        filepath=entry.filepath,
                    )
                )
                logger.debug(
                    "registered %s %s from %s", exported.method, route.path, entry.filepath
                )

    return tuple(registrations)
