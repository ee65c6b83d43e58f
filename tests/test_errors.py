"""Tests for warbler.errors: the exception hierarchy."""

from warbler.errors import (
    HTTPError,
    LocaleAlreadyResolved,
    MethodNotAllowed,
    MissingRouteParameter,
    NavigationAborted,
    NavigationRedirect,
    NotFound,
    UnrecognizedLocale,
    WarblerError,
)


class TestHTTPErrors:
    def test_not_found(self) -> None:
        exc = NotFound()
        assert exc.status == 404
        assert str(exc) == "404: Not Found"

    def test_method_not_allowed_lists_methods(self) -> None:
        exc = MethodNotAllowed(frozenset({"POST", "GET"}))
        assert exc.status == 405
        assert exc.headers == (("Allow", "GET, POST"),)

    def test_status_only(self) -> None:
        assert str(HTTPError(status=503)) == "503"


class TestLocaleErrors:
    def test_all_are_warbler_errors(self) -> None:
        for exc in (
            UnrecognizedLocale("de"),
            MissingRouteParameter("/users/{id}", ("id",)),
            LocaleAlreadyResolved("en", "tr"),
            NavigationAborted("/feed"),
            NavigationRedirect("/tr/feed"),
        ):
            assert isinstance(exc, WarblerError)

    def test_missing_route_parameter_message(self) -> None:
        exc = MissingRouteParameter("/users/{id}/posts/{post}", ("id", "post"))
        assert str(exc) == "Route '/users/{id}/posts/{post}' is missing required parameter(s): id, post"

    def test_unrecognized_locale_keeps_value(self) -> None:
        exc = UnrecognizedLocale(None)
        assert exc.value is None
        assert str(exc) == "Unrecognized locale: None"

    def test_navigation_redirect_defaults(self) -> None:
        exc = NavigationRedirect("/tr/feed")
        assert exc.status == 307
        assert exc.url == "/tr/feed"
