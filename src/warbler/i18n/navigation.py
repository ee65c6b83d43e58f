"""Locale-aware navigation contract and its server-side implementation.

Application code depends on the ``Navigator`` protocol only. Each
runtime provides one implementation:

- ``ServerNavigator`` (this module): server-rendered requests.
- ``ClientNavigator`` (``warbler.i18n.client``): interactive clients.

Handlers get a ``ServerNavigator`` by annotating a parameter::

    @app.route("/snippets/new", methods=["POST"])
    async def create(request: Request, nav: Navigator):
        snippet = await save(await request.form())
        await nav.navigate(RouteTarget("/snippets/{id}", {"id": snippet.id}))
"""

import logging
from typing import Any, NoReturn, Protocol, runtime_checkable

from warbler.errors import NavigationRedirect
from warbler.i18n.context import RequestLocaleContext, current_path
from warbler.i18n.links import RouteTargetLike
from warbler.i18n.locale import LocaleRouter

logger = logging.getLogger("warbler.navigation")


@runtime_checkable
class Navigator(Protocol):
    """Locale-aware navigation primitives.

    No base class required; the five operations are the contract.
    """

    def resolve(self, source: Any = None) -> str: ...

    def set_active_locale(self, locale: str) -> RequestLocaleContext: ...

    def render_link(self, target: RouteTargetLike, locale: str | None = None) -> str: ...

    async def navigate(self, target: RouteTargetLike, locale: str | None = None) -> Any: ...

    def current_path(self) -> str: ...


class ServerNavigator:
    """Navigator for server-rendered requests.

    ``navigate()`` never returns: it raises ``NavigationRedirect``, which
    the request pipeline turns into a redirect response, ending the
    current request. htmx fragment requests get an ``HX-Location``
    header instead, so the browser navigates without a full reload.
    """

    __slots__ = ("router",)

    def __init__(self, router: LocaleRouter) -> None:
        self.router = router

    def resolve(self, source: Any = None) -> str:
        """Determine the locale for *source* (see ``LocaleRouter.resolve``)."""
        return self.router.resolve(source)

    def set_active_locale(self, locale: str) -> RequestLocaleContext:
        """Declare the locale for the rest of the current request."""
        return self.router.set_active_locale(locale)

    def render_link(self, target: RouteTargetLike, locale: str | None = None) -> str:
        """Build the path of *target* in *locale* (default: the request's)."""
        return self.router.render_link(target, locale)

    def current_path(self) -> str:
        """The raw path of the current request, locale prefix included."""
        return current_path()

    def current_locale(self) -> str:
        return self.router.current_locale()

    def redirect(self, target: RouteTargetLike, locale: str | None = None) -> NoReturn:
        """Stop handling the current request and redirect to *target*.

        Uses ``303 See Other`` after unsafe methods (form posts) so the
        browser follows with a GET, ``307`` otherwise.
        """
        url = self.render_link(target, locale)
        status = 307
        from warbler.context import request_var

        request = request_var.get(None)
        if request is not None and request.method not in ("GET", "HEAD"):
            status = 303
        logger.debug("Redirect %d -> %s", status, url)
        raise NavigationRedirect(url, status)

    async def navigate(self, target: RouteTargetLike, locale: str | None = None) -> NoReturn:
        """Async alias of ``redirect()`` so both runtimes share one signature."""
        self.redirect(target, locale)
