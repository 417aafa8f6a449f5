"""Mutable HTTP response.

Unlike the request, a response is shared and edited in place: every
chain link that retrieves the materialized response for a request gets
the same object, and header changes made by one are seen by all.
"""

from __future__ import annotations

import json as json_module
from dataclasses import dataclass, field
from typing import Any

from warren.http.headers import Headers, HeadersInit

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass(slots=True, eq=False)
class Response:
    """An HTTP response.

    ``body`` is ``None`` for empty responses. ``headers`` is always a
    ``Headers`` instance; mappings and pair lists are converted.
    """

    body: str | bytes | None = None
    status: int = 200
    status_text: str = ""
    headers: Headers = field(default_factory=Headers)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    # -- Constructors --

    @classmethod
    def text_response(
        cls, text: str, *, status: int = 200, headers: HeadersInit = None
    ) -> Response:
        """A ``text/plain`` response."""
        out = cls(body=text, status=status, headers=Headers(headers))
        out.headers.setdefault("Content-Type", TEXT_CONTENT_TYPE)
        return out

    @classmethod
    def json(
        cls, data: Any, *, status: int = 200, headers: HeadersInit = None
    ) -> Response:
        """A JSON response. Raises ``TypeError`` for unserializable data."""
        out = cls(body=json_module.dumps(data), status=status, headers=Headers(headers))
        out.headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
        return out

    @classmethod
    def empty(cls, status: int = 204, *, headers: HeadersInit = None) -> Response:
        return cls(body=None, status=status, headers=Headers(headers))

    # -- Body helpers --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if self.body is None:
            return b""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        return self.body_bytes.decode("utf-8")

    def json_body(self) -> Any:
        """Parse the body as JSON."""
        return json_module.loads(self.body_bytes)

    def __repr__(self) -> str:
        return f"<Response {self.status} {dict(self.headers.lowered())!r}>"
