"""Error handling pipeline for warbler requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or plain defaults.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from kida import Environment

from warbler.errors import HTTPError
from warbler.http.request import Request
from warbler.http.response import Response
from warbler.server.negotiation import negotiate

logger = logging.getLogger("warbler.server")


def default_fragment_error(status: int, detail: str) -> str:
    """Minimal HTML snippet for fragment error responses."""
    return f'<div class="warbler-error" data-status="{status}">{html.escape(detail)}</div>'


def _with_htmx_error_headers(response: Response, request: Request) -> Response:
    """Point htmx at the ``#warbler-error`` container for fragment requests."""
    if not request.is_fragment:
        return response
    return (
        response
        .with_header("HX-Retarget", "#warbler-error")
        .with_header("HX-Reswap", "innerHTML")
    )


def render_traceback(exc: Exception, request: Request) -> str:
    """Debug-mode body for a 500: the request line and the traceback."""
    lines = "".join(traceback.format_exception(exc))
    title = html.escape(f"{type(exc).__name__}: {exc}")
    return (
        f"<h1>{title}</h1>"
        f"<p>{html.escape(request.method)} {html.escape(request.url)}</p>"
        f"<pre>{html.escape(lines)}</pre>"
    )


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
    kida_env: Environment | None,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    return negotiate(result, kida_env=kida_env)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.raw_path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    detail = exc.detail or f"Error {exc.status}"
    if debug and exc.detail:
        detail = f"{exc.status}: {exc.detail}"

    body = default_fragment_error(exc.status, detail) if request.is_fragment else html.escape(detail)
    resp = Response(body=body).with_status(exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return _with_htmx_error_headers(resp, request)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None,
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.raw_path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        response = await call_error_handler(handler, request, exc, kida_env)
        return response if response.status != 200 else response.with_status(500)

    if debug:
        return _with_htmx_error_headers(
            Response(body=render_traceback(exc, request), status=500), request
        )

    if request.is_fragment:
        resp = Response(body=default_fragment_error(500, "Internal Server Error"), status=500)
        return _with_htmx_error_headers(resp, request)

    return Response(body="Internal Server Error", status=500)
