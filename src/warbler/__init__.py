"""Warbler: a locale-routed web framework for multi-tenant platforms.

Every route is written once, locale-neutral, and served under each
supported locale. Links, redirects and client-side navigation are all
built through one locale router, so a page never links out of the
visitor's locale by accident.

Basic usage::

    from warbler import App, LocaleConfig, Navigator, RouteTarget

    app = App(i18n=LocaleConfig(locales=("en", "tr"), default_locale="en"))

    @app.route("/snippets/new", methods=["POST"])
    async def create(request, nav: Navigator):
        snippet = await save(await request.form())
        await nav.navigate(RouteTarget("/snippets/{id}", {"id": snippet.id}))

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "App",
    "AppConfig",
    "ClientNavigator",
    "ConfigurationError",
    "Fragment",
    "HTTPError",
    "LocaleAlreadyResolved",
    "LocaleConfig",
    "LocaleRouter",
    "MethodNotAllowed",
    "Middleware",
    "MissingRouteParameter",
    "NavigationAborted",
    "Navigator",
    "Next",
    "NotFound",
    "PrefixPolicy",
    "Redirect",
    "Request",
    "Response",
    "RouteTarget",
    "ServerNavigator",
    "Template",
    "UnrecognizedLocale",
    "WarblerError",
    "current_locale",
    "current_path",
    "g",
    "get_request",
    "get_translations",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import warbler`` fast while providing a clean top-level API.
    """
    if name == "App":
        from warbler.app import App

        return App

    if name == "AppConfig":
        from warbler.config import AppConfig

        return AppConfig

    if name == "Request":
        from warbler.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from warbler.http import response as _resp

        return getattr(_resp, name)

    if name in ("Template", "Fragment"):
        from warbler.templating import returns as _tmpl

        return getattr(_tmpl, name)

    if name in ("AnyResponse", "Middleware", "Next"):
        from warbler.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("g", "get_request"):
        from warbler import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ClientNavigator",
        "LocaleConfig",
        "LocaleRouter",
        "Navigator",
        "PrefixPolicy",
        "RouteTarget",
        "ServerNavigator",
        "current_locale",
        "current_path",
        "get_translations",
    ):
        from warbler import i18n as _i18n

        return getattr(_i18n, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "LocaleAlreadyResolved",
        "MethodNotAllowed",
        "MissingRouteParameter",
        "NavigationAborted",
        "NotFound",
        "UnrecognizedLocale",
        "WarblerError",
    ):
        from warbler import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
