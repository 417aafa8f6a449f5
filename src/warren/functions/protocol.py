"""What the functions layer needs from a host router.

No base class required. ``warren.routing.Context`` satisfies these
protocols, and so does any other router context with the same shape.
"""

from collections.abc import Awaitable, Mapping, Sequence
from typing import Any, Protocol

from warren.http.request import Request
from warren.http.response import Response


class HostRequestView(Protocol):
    """The inbound request plus the captures of the current pattern."""

    raw: Request

    @property
    def method(self) -> str: ...

    @property
    def path(self) -> str: ...

    def param(self) -> Mapping[str, Any]: ...


class BackgroundTasks(Protocol):
    def wait_until(self, work: Awaitable[Any]) -> None: ...


class HostContext(Protocol):
    """Per-request state owned by the host router.

    ``res`` is the explicit "current in-progress response" query: the
    response the host would send if the pipeline stopped now, or
    ``None`` before anything produced one.
    """

    req: HostRequestView
    env: Mapping[str, Any]
    execution_ctx: BackgroundTasks

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any) -> None: ...

    def header(self, name: str, value: str | Sequence[str] | None) -> None: ...

    @property
    def res(self) -> Response | None: ...
