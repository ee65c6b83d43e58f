"""The middleware seam.

Middleware wraps the handler chain::

    async def my_mw(request: Request, next: Next) -> Response: ...

With i18n configured, ``LocaleMiddleware`` is always the outermost
entry, so by the time any other middleware runs ``request.path`` is
locale-neutral and ``current_locale()`` answers for the request.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from warbler.http.request import Request
from warbler.http.response import Response

type AnyResponse = Response

type Next = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Anything awaitable as ``mw(request, next)``.

    A function works, and so does an object with ``__call__``::

        async def vary_on_language(request: Request, next: Next) -> AnyResponse:
            response = await next(request)
            return response.with_header("Vary", "Accept-Language")
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
