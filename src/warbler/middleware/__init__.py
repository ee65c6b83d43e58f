"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    LocaleMiddleware -- Locale prefix stripping, canonical redirects, detection
    GuardMiddleware -- Sign-in wall for protected paths
"""

from warbler.middleware.guard import GuardConfig, GuardMiddleware, safe_redirect_target
from warbler.middleware.locale import LocaleMiddleware
from warbler.middleware.protocol import Middleware, Next

__all__ = [
    "GuardConfig",
    "GuardMiddleware",
    "LocaleMiddleware",
    "Middleware",
    "Next",
    "safe_redirect_target",
]
