"""Directory-of-files routing on top of the pattern router.

Each ``.py`` file under the functions directory is a route; its path is
its URL, with bracket segments for parameters. Files export handlers
named after the methods they serve::

    # functions/api/users/[id].py
    async def on_request_get(context):
        return {"id": context.params["id"]}

``_middleware.py`` files wrap their whole directory subtree::

    # functions/api/_middleware.py
    async def on_request(context):
        response = await context.next()
        response.headers["Access-Control-Allow-Origin"] = "*"
        return response

Usage::

    router = Router()
    await load_functions(router, FunctionsConfig(
        modules=discover_modules("functions"),
        base_dir="functions",
    ))
"""

from warren.functions.chain import Chain, compose_chain
from warren.functions.compiler import filepath_to_routes, method_for_export
from warren.functions.context import FunctionContext, SharedStore, make_context
from warren.functions.discovery import discover_modules
from warren.functions.loader import load_functions
from warren.functions.response import (
    clone_with_extras,
    ensure_vary_origin,
    materialize,
    normalize,
)
from warren.functions.types import CompiledPath, CompiledRoute, HandlerModule, Registration

__all__ = [
    "Chain",
    "CompiledPath",
    "CompiledRoute",
    "FunctionContext",
    "HandlerModule",
    "Registration",
    "SharedStore",
    "clone_with_extras",
    "compose_chain",
    "discover_modules",
    "ensure_vary_origin",
    "filepath_to_routes",
    "load_functions",
    "make_context",
    "materialize",
    "method_for_export",
    "normalize",
]
