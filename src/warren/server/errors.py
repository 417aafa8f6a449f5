"""Error responses for warren requests.

Maps HTTPError exceptions and unexpected failures to Response objects.
"""

import logging
import traceback

from warren.errors import HTTPError
from warren.http.request import Request
from warren.http.response import Response

logger = logging.getLogger("warren.server")


def http_error_response(exc: HTTPError, *, debug: bool = False) -> Response:
    """Build the default response for an ``HTTPError``."""
    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"
    return Response.text_response(detail, status=exc.status, headers=exc.headers)


def handle_http_error(exc: HTTPError, request: Request, *, debug: bool = False) -> Response:
    """Map an HTTPError raised out of the pipeline to a Response."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)
    return http_error_response(exc, debug=debug)


def handle_internal_error(exc: Exception, request: Request, *, debug: bool = False) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    if debug:
        body = "".join(traceback.format_exception(exc))
        return Response.text_response(body, status=500)

    return Response.text_response("Internal Server Error", status=500)
