"""Immutable HTTP request.

Frozen metadata plus the fully-read body. Handlers that want a different
request build a new one with ``with_*()`` and hand it to ``next()``;
the chain stores a defensive ``clone()`` of it.
"""

from __future__ import annotations

import json as json_module
from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl

from warren._internal.asgi import Receive, Scope
from warren.http.headers import Headers, HeadersInit


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``headers`` is a ``Headers`` instance owned by this request. It is
    never shared between a request and its clones.
    """

    method: str = "GET"
    path: str = "/"
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""
    query_string: str = ""
    client: tuple[str, int] | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))

    # -- Construction --

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        *,
        headers: HeadersInit = None,
        body: bytes | str = b"",
    ) -> Request:
        """Build a request from a path that may carry a query string."""
        path_part, _, query_string = path.partition("?")
        if isinstance(body, str):
            body = body.encode("utf-8")
        return cls(
            method=method,
            path=path_part or "/",
            headers=Headers(headers),
            body=body,
            query_string=query_string,
        )

    @classmethod
    async def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Build a request from an ASGI HTTP scope, reading the body fully."""
        chunks: list[bytes] = []
        while True:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunk = message.get("body", b"")
            if chunk:
                chunks.append(chunk)
            if not message.get("more_body", False):
                break

        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers.from_raw(scope.get("headers", ())),
            body=b"".join(chunks),
            query_string=scope.get("query_string", b"").decode("latin-1"),
            client=tuple(client) if client else None,
        )

    # -- Copies --

    def clone(self) -> Request:
        """Return an equal request with its own header collection."""
        return replace(self, headers=self.headers.copy())

    def with_header(self, name: str, value: str) -> Request:
        """Return a new Request with *name* set to *value*."""
        headers = self.headers.copy()
        headers[name] = value
        return replace(self, headers=headers)

    def with_method(self, method: str) -> Request:
        return replace(self, method=method, headers=self.headers.copy())

    def with_path(self, path: str) -> Request:
        return replace(self, path=path, headers=self.headers.copy())

    # -- Accessors --

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query_string:
            return f"{self.path}?{self.query_string}"
        return self.path

    @property
    def query(self) -> dict[str, str]:
        """Query parameters; the last value wins for repeated keys."""
        return dict(parse_qsl(self.query_string, keep_blank_values=True))

    @property
    def text(self) -> str:
        return self.body.decode("utf-8")

    def json(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(self.body or b"null")
