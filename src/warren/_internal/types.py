"""Shared type aliases used across warren modules."""

from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

# User-defined function handler: ``(context)`` or ``(context, next)``
Handler: TypeAlias = Callable[..., Any]

# Host-level callable registered on the router: ``(host, next)``
HostHandler: TypeAlias = Callable[..., Awaitable[Any]]

# Zero-argument downstream call returning the in-progress response
Downstream: TypeAlias = Callable[[], Awaitable[Any]]
