"""Warbler exception hierarchy.

Shared across Router, App, handler, middleware, and the locale layer so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class WarblerError(Exception):
    """Base for all warbler-specific errors."""


class ConfigurationError(WarblerError):
    """Raised when app or locale configuration is invalid.

    Typically raised by ``LocaleConfig`` at construction or caught during
    ``App._freeze()`` at startup.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(WarblerError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


# -- Locale layer --


class UnrecognizedLocale(WarblerError):  # noqa: N818
    """A locale value outside the supported set.

    Never escapes ``resolve()``: the locale layer catches it and
    substitutes the default locale.
    """

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(f"Unrecognized locale: {value!r}")


class MissingRouteParameter(WarblerError):
    """A structured route target is missing a placeholder value.

    Raised by ``render_link()`` and ``navigate()``. The caller must not
    render the link.
    """

    def __init__(self, template: str, missing: tuple[str, ...]) -> None:
        self.template = template
        self.missing = missing
        names = ", ".join(missing)
        super().__init__(f"Route {template!r} is missing required parameter(s): {names}")


class LocaleAlreadyResolved(WarblerError):
    """The request locale was already set to a different value.

    Locale resolution is a single assignment per request.
    """

    def __init__(self, current: str, attempted: str) -> None:
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"Request locale is already {current!r}; cannot change it to {attempted!r}"
        )


class NavigationAborted(WarblerError):  # noqa: N818
    """A client navigation was superseded before it completed.

    Not a failure. ``ClientNavigator.navigate()`` swallows it and
    returns ``None``.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Navigation to {path!r} was superseded")


class NavigationRedirect(WarblerError):  # noqa: N818
    """Raised by server-side ``navigate()`` / ``redirect()``.

    The ASGI handler converts it into a redirect response and stops
    handling the current request.
    """

    def __init__(self, url: str, status: int = 307) -> None:
        self.url = url
        self.status = status
        super().__init__(f"Redirect {status} to {url!r}")
