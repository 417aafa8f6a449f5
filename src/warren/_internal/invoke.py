"""Invoke helpers — call sync or async handlers uniformly.

Function handlers can be ``def`` or ``async def``. Any code that calls
a user-provided handler must handle both cases. This module keeps the
sync/async check and the arity check in exactly one place.

Usage::

    from warren._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with both sync and async callables::

        def on_request(context):
            return {"ok": True}

        async def on_request(context):
            return await context.next()
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


def positional_arity(handler: Any) -> int:
    """Number of positional arguments *handler* accepts.

    ``*args`` counts as unbounded. Callables without an inspectable
    signature (some builtins) count as one.
    """
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        return 1

    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return 2**31
        if param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            count += 1
    return count
