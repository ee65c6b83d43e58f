"""Access guard: keep anonymous visitors out of member-only pages.

Runs after ``LocaleMiddleware``, so it sees locale-neutral paths
(``/feed`` for both ``/feed`` and ``/tr/feed``) and builds its redirects
in the request's locale.

- Anonymous visitors on a protected path go to the login page, with the
  path they asked for in the ``redirect`` query parameter.
- Signed-in visitors on an auth page (login, signup) go to the home page.

Usage::

    async def authenticate(request: Request) -> User | None:
        return await sessions.user_for(request.cookies.get("sid"))

    app.add_middleware(GuardMiddleware(GuardConfig(authenticate=authenticate)))

    # In the login handler, after verifying credentials:
    return Redirect(safe_redirect_target(request))
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlencode

from warbler.context import g
from warbler.errors import ConfigurationError
from warbler.http.request import Request
from warbler.http.response import redirect_response
from warbler.i18n.context import get_active_router
from warbler.middleware.protocol import AnyResponse, Next
from warbler.security.urls import is_safe_url

logger = logging.getLogger("warbler.server")


@dataclass(frozen=True, slots=True)
class GuardConfig:
    """Access guard configuration.

    Attributes:
        authenticate: Async callback returning the signed-in user for a
            request, or ``None`` for anonymous visitors.
        protected_paths: Path prefixes that require a signed-in user.
        auth_paths: Path prefixes of the sign-in pages.
        login_path: Where anonymous visitors are sent.
        home_path: Where signed-in visitors on an auth page are sent.
        redirect_param: Query parameter carrying the originally requested path.
    """

    authenticate: Callable[[Request], Awaitable[Any]] | None = None
    protected_paths: tuple[str, ...] = (
        "/feed",
        "/snippets/new",
        "/messages",
        "/settings",
        "/admin",
    )
    auth_paths: tuple[str, ...] = ("/login", "/signup")
    login_path: str = "/login"
    home_path: str = "/feed"
    redirect_param: str = "redirect"


def _matches(path: str, prefixes: tuple[str, ...]) -> bool:
    return any(path == p or path.startswith(p.rstrip("/") + "/") for p in prefixes)


def _localized(path: str) -> str:
    router = get_active_router()
    return router.render_link(path) if router is not None else path


def safe_redirect_target(request: Request, fallback: str = "/feed", param: str = "redirect") -> str:
    """Return the post-login destination carried by *request*.

    Falls back to *fallback* (localized) when the parameter is missing
    or points off-site.
    """
    target = request.query.get(param)
    if target is not None and is_safe_url(target):
        return target
    if target is not None:
        logger.warning("Rejected unsafe redirect target %r", target)
    return _localized(fallback)


class GuardMiddleware:
    """Redirect visitors who are on the wrong side of a sign-in wall.

    The authenticated user (or ``None``) is stored as ``g.user`` for
    handlers and templates.
    """

    __slots__ = ("config",)

    def __init__(self, config: GuardConfig) -> None:
        if config.authenticate is None:
            msg = "GuardConfig requires an 'authenticate' callback."
            raise ConfigurationError(msg)
        self.config = config

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Check access for the request, then dispatch."""
        cfg = self.config
        assert cfg.authenticate is not None
        user = await cfg.authenticate(request)
        g.user = user
        status = 307 if request.method in ("GET", "HEAD") else 303

        if user is None and _matches(request.path, cfg.protected_paths):
            query = urlencode({cfg.redirect_param: request.raw_path})
            url = f"{_localized(cfg.login_path)}?{query}"
            logger.debug("Anonymous access to %s, redirecting to %s", request.raw_path, url)
            return redirect_response(url, status, fragment=request.is_fragment)

        if user is not None and _matches(request.path, cfg.auth_paths):
            url = _localized(cfg.home_path)
            return redirect_response(url, status, fragment=request.is_fragment)

        return await next(request)
