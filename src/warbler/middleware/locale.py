"""Locale middleware: the single place a request's locale is resolved.

For every request it:

1. Splits a supported locale prefix off the path (``/tr/forum`` routes
   as ``/forum``). ``request.raw_path`` keeps the original path.
2. Canonicalizes GET/HEAD requests with a redirect when the path does
   not match the prefix policy (``/en/forum`` -> ``/forum`` under
   omit-default-prefix, ``/forum`` -> ``/en/forum`` under always-prefix).
3. Records the resolved locale in the request's locale context, so
   ``current_locale()``, ``render_link()`` and templates agree on it.
   The context lives until the request scope closes, so error handlers
   render in the same locale.
4. Tags the response with ``Content-Language`` and, when detection is
   on, remembers the locale in a cookie.

``App(i18n=LocaleConfig(...))`` installs it as the outermost middleware.
"""

import logging

from warbler.http.request import Request
from warbler.http.response import redirect_response
from warbler.i18n.config import PrefixPolicy
from warbler.i18n.context import RequestLocaleContext, activate
from warbler.i18n.locale import LocaleRouter
from warbler.middleware.protocol import AnyResponse, Next

logger = logging.getLogger("warbler.i18n")

_REDIRECTABLE = frozenset({"GET", "HEAD"})


class LocaleMiddleware:
    """Resolve the request locale from the path prefix, or detect it.

    Usage::

        router = LocaleRouter(LocaleConfig(locales=("en", "tr"), default_locale="en"))
        app.add_middleware(LocaleMiddleware(router))
    """

    __slots__ = ("router",)

    def __init__(self, router: LocaleRouter) -> None:
        self.router = router

    def _is_excluded(self, path: str) -> bool:
        return any(
            path == prefix or path.startswith(prefix.rstrip("/") + "/")
            for prefix in self.router.config.exclude_paths
        )

    def _detect(self, request: Request) -> str | None:
        if not self.router.config.detect:
            return None
        return self.router.detect(request)

    def _canonical(self, request: Request, prefix: str | None) -> str | None:
        """Return the locale to redirect to, or ``None`` if the path is canonical."""
        config = self.router.config
        if prefix is not None:
            return prefix if config.omits_prefix(prefix) else None
        if config.prefix_policy is PrefixPolicy.ALWAYS:
            return self._detect(request) or config.default_locale
        detected = self._detect(request)
        if detected is not None and detected != config.default_locale:
            return detected
        return None

    def _redirect(self, request: Request, route_path: str, locale: str) -> AnyResponse:
        url = self.router.localize(route_path, locale)
        query = request.query.raw.decode("latin-1")
        if query:
            url = f"{url}?{query}"
        logger.debug("Locale redirect %s -> %s", request.url, url)
        response = redirect_response(url, 307, fragment=request.is_fragment)
        return self._remember(request, response, locale)

    def _remember(self, request: Request, response: AnyResponse, locale: str) -> AnyResponse:
        config = self.router.config
        if not config.detect or request.cookies.get(config.cookie_name) == locale:
            return response
        return response.with_cookie(
            config.cookie_name,
            locale,
            max_age=config.cookie_max_age,
            httponly=False,
        )

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        """Resolve the locale, then dispatch with the prefix stripped."""
        config = self.router.config

        if self._is_excluded(request.path):
            context = RequestLocaleContext(
                locale=config.default_locale,
                raw_path=request.raw_path,
                route_path=request.path,
            )
            activate(context)
            return await next(request)

        prefix, route_path = self.router.split_path(request.path)

        if request.method in _REDIRECTABLE:
            target_locale = self._canonical(request, prefix)
            if target_locale is not None:
                return self._redirect(request, route_path, target_locale)

        if prefix is not None:
            locale = prefix
        elif config.prefix_policy is PrefixPolicy.ALWAYS:
            locale = self._detect(request) or config.default_locale
        else:
            locale = config.default_locale

        context = RequestLocaleContext(
            locale=locale,
            raw_path=request.raw_path,
            route_path=route_path,
            explicit=prefix is not None,
        )
        activate(context)
        response = await next(request.with_path(route_path))

        response = response.with_header("Content-Language", locale)
        return self._remember(request, response, locale)
