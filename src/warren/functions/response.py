"""Response materialization and header reconciliation.

Each request gets at most one *materialized* response: a mutable
``Response`` created the first time any chain link needs it and stored
in the shared store. Every later link gets the same object back, so a
header set by one is seen by all. The global wrapper returns a clone of
it with the trace header stamped on, which is what the client receives.
"""

import json as json_module
from collections.abc import Mapping
from typing import Any

from warren._internal.types import Downstream
from warren.functions.context import MATERIALIZED_RESPONSE_KEY, SharedStore
from warren.functions.protocol import HostContext
from warren.http.headers import Headers
from warren.http.response import JSON_CONTENT_TYPE, Response


def _shaped_like_response(value: Any) -> bool:
    """True for objects carrying a status, headers, and a body."""
    if isinstance(value, Mapping):
        return bool(value.get("status")) and bool(value.get("headers")) and "body" in value
    return (
        bool(getattr(value, "status", None))
        and getattr(value, "headers", None) is not None
        and hasattr(value, "body")
    )


def _rebuild(value: Any) -> Response:
    if isinstance(value, Mapping):
        status, headers, body = value["status"], value["headers"], value.get("body")
    else:
        status, headers, body = value.status, value.headers, value.body
    response = Response(status=int(status), headers=Headers(headers))
    if body is None or isinstance(body, (str, bytes)):
        response.body = body
    elif isinstance(body, bytearray):
        response.body = bytes(body)
    else:
        try:
            response.body = json_module.dumps(body)
        except (TypeError, ValueError):
            response.body = "{}"
        response.headers.setdefault("Content-Type", JSON_CONTENT_TYPE)
    return response


def _json_response(value: Any) -> Response:
    try:
        return Response.json(value)
    except (TypeError, ValueError):
        return Response.json({})


def normalize(value: Any) -> Response:
    """Turn any handler result into a fresh, mutable ``Response``.

    - ``None`` → empty 204
    - ``Response`` → copy with its own header collection
    - response-shaped mapping or object (``status``, ``headers``,
      ``body``) → rebuilt with copied headers
    - strings, bytes, numbers, booleans → plain 200 body
    - anything else → JSON, ``{}`` if it doesn't serialize

    Never raises.
    """
    if value is None:
        return Response.empty(204)

    if isinstance(value, Response):
        return Response(
            body=value.body,
            status=value.status,
            status_text=value.status_text,
            headers=Headers(value.headers),
        )

    if isinstance(value, (str, bytes)):
        return Response(body=value)
    if isinstance(value, bytearray):
        return Response(body=bytes(value))
    if isinstance(value, bool):
        return Response(body="true" if value else "false")
    if isinstance(value, (int, float)):
        return Response(body=str(value))

    if _shaped_like_response(value):
        try:
            return _rebuild(value)
        except (TypeError, ValueError, KeyError):
            return _json_response(value)

    return _json_response(value)


async def materialize(host: HostContext, downstream: Downstream) -> Response:
    """Return the request's materialized response, creating it if needed.

    On first use the downstream continuation runs; its result is
    authoritative when it is a ``Response``, otherwise the host's
    in-progress response (``host.res``) is used. Either way the result
    is normalized and stored. Later calls return the stored object, as does
    this call when a nested chain stored one while downstream ran.
    """
    store = SharedStore(host)
    shared = store.get(MATERIALIZED_RESPONSE_KEY)
    if shared is not None:
        return shared

    result = await downstream()

    # A nested chain may have materialized the response while downstream ran.
    shared = store.get(MATERIALIZED_RESPONSE_KEY)
    if shared is not None:
        return shared

    if isinstance(result, Response):
        authoritative = result
    elif isinstance(host.res, Response):
        authoritative = host.res
    else:
        authoritative = result

    shared = normalize(authoritative)
    store.set(MATERIALIZED_RESPONSE_KEY, shared)
    return shared


def ensure_vary_origin(response: Response) -> None:
    """Make sure ``Vary`` lists ``Origin``, keeping every existing token."""
    current = ", ".join(v for v in response.headers.get_list("Vary") if v.strip())
    if not current:
        response.headers["Vary"] = "Origin"
        return
    tokens = [token.strip().lower() for token in current.split(",")]
    if "origin" not in tokens:
        current = f"{current}, Origin"
    response.headers["Vary"] = current


def merge_headers(target: Response, source: Response) -> None:
    """Copy every header of *source* onto *target*, replacing same names."""
    for name in source.headers:
        values = source.headers.get_list(name)
        target.headers[name] = values[0]
        for value in values[1:]:
            target.headers.append(name, value)


def clone_with_extras(response: Response, extra: Mapping[str, str] | None = None) -> Response:
    """A new response sharing *response*'s body, with *extra* headers overlaid."""
    headers = Headers(response.headers)
    for name, value in (extra or {}).items():
        headers[name] = value
    return Response(
        body=response.body,
        status=response.status,
        status_text=response.status_text,
        headers=headers,
    )
