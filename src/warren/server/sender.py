"""ASGI response sending — translates a warren Response to ASGI messages."""

from warren._internal.asgi import Send
from warren.http.response import TEXT_CONTENT_TYPE, Response


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send) -> None:
    """Translate a Response into ASGI send() calls."""
    body = response.body_bytes if _body_allowed(response.status) else b""

    raw_headers = [
        (name, value) for name, value in response.headers.raw if name != b"content-length"
    ]
    if body and "content-type" not in response.headers:
        raw_headers.append((b"content-type", TEXT_CONTENT_TYPE.encode("latin-1")))
    if _body_allowed(response.status):
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send(
        {
            "type": "http.response.body",
            "body": body,
        }
    )
