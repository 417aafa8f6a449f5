"""Routing — ordered pattern router and its per-request host context.

Routes and middleware are registered during setup, dispatched in
registration order, and frozen before the first request.
"""

from warren.routing.context import Context, ExecutionContext, HostRequest
from warren.routing.pattern import PathPattern, compile_pattern
from warren.routing.router import ANY_METHOD, HTTP_METHODS, RouteEntry, Router

__all__ = [
    "ANY_METHOD",
    "HTTP_METHODS",
    "Context",
    "ExecutionContext",
    "HostRequest",
    "PathPattern",
    "RouteEntry",
    "Router",
    "compile_pattern",
]
