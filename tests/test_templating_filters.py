"""Tests for warbler.templating.filters: built-in filters and locale globals."""

from collections.abc import Iterator

import pytest
from kida.template import Markup

from warbler.errors import MissingRouteParameter
from warbler.i18n import context as locale_context
from warbler.i18n.config import LocaleConfig
from warbler.i18n.context import RequestLocaleContext
from warbler.i18n.links import RouteTarget
from warbler.i18n.locale import LocaleRouter
from warbler.i18n.messages import Messages
from warbler.templating.filters import BUILTIN_FILTERS, attr, locale_globals, qs

MESSAGES = Messages(
    {"en": {"Nav": {"profile": "{name}'s profile"}}, "tr": {"Nav": {"profile": "{name} profili"}}},
    "en",
)


class TestAttr:
    def test_truthy_returns_attribute(self) -> None:
        assert attr("page", "aria-current") == ' aria-current="page"'

    def test_falsy_returns_empty(self) -> None:
        assert attr("", "aria-current") == ""
        assert attr(None, "aria-current") == ""

    def test_escapes_value(self) -> None:
        assert attr('"><script>', "title") == ' title="&quot;&gt;&lt;script&gt;"'

    def test_returns_markup(self) -> None:
        assert isinstance(attr("x", "title"), Markup)


class TestQs:
    def test_single_param(self) -> None:
        assert qs("/tr/forum", page=2) == "/tr/forum?page=2"

    def test_omits_falsy_values(self) -> None:
        assert qs("/forum", page=3, type="") == "/forum?page=3"

    def test_all_falsy_returns_base(self) -> None:
        assert qs("/forum", type=None) == "/forum"

    def test_appends_to_existing_query(self) -> None:
        assert qs("/forum?type=question", page=2) == "/forum?type=question&page=2"

    def test_special_characters_encoded(self) -> None:
        assert qs("/search", q="a b&c") == "/search?q=a%20b%26c"

    def test_registry(self) -> None:
        assert BUILTIN_FILTERS == {"attr": attr, "qs": qs}


@pytest.fixture
def globals_() -> Iterator[dict]:
    router = LocaleRouter(LocaleConfig(locales=("en", "tr"), default_locale="en"), MESSAGES)
    tokens = locale_context.open_scope(router)
    try:
        yield locale_globals(router)
    finally:
        locale_context.close_scope(tokens)


def _activate(locale: str, raw_path: str, route_path: str) -> None:
    locale_context.activate(RequestLocaleContext(locale, raw_path, route_path, explicit=True))


class TestLocaleGlobals:
    def test_link_uses_request_locale(self, globals_: dict) -> None:
        _activate("tr", "/tr/feed", "/feed")
        assert globals_["link"]("/forum/new") == "/tr/forum/new"
        assert globals_["link"]("/forum/new", "en") == "/forum/new"

    def test_link_fills_params(self, globals_: dict) -> None:
        assert globals_["link"]("/users/{id}", id=5) == "/users/5"

    def test_link_params_keep_query_and_fragment(self, globals_: dict) -> None:
        link = globals_["link"]("/users/{id}?tab=posts#latest", "tr", id=5)
        assert link == "/tr/users/5?tab=posts#latest"

    def test_link_params_merge_into_target(self, globals_: dict) -> None:
        target = RouteTarget("/users/{id}/posts/{post}", {"id": 5})
        assert globals_["link"](target, post=9) == "/users/5/posts/9"

    def test_link_missing_param(self, globals_: dict) -> None:
        with pytest.raises(MissingRouteParameter):
            globals_["link"]("/users/{id}", "tr", tab="posts")

    def test_current_locale_and_path(self, globals_: dict) -> None:
        _activate("tr", "/tr/feed", "/feed")
        assert globals_["current_locale"]() == "tr"
        assert globals_["current_path"]() == "/tr/feed"

    def test_translate(self, globals_: dict) -> None:
        _activate("tr", "/tr/feed", "/feed")
        assert globals_["t"]("Nav.profile", name="Ayşe") == "Ayşe profili"

    def test_translate_without_catalogs_returns_key(self) -> None:
        router = LocaleRouter(LocaleConfig(locales=("en", "tr")))
        assert locale_globals(router)["t"]("Nav.profile") == "Nav.profile"

    def test_alternates(self, globals_: dict) -> None:
        _activate("tr", "/tr/users/5", "/users/5")
        assert globals_["alternates"]() == [
            {"locale": "en", "href": "/users/5"},
            {"locale": "tr", "href": "/tr/users/5"},
        ]

    def test_locales(self, globals_: dict) -> None:
        assert globals_["locales"] == ("en", "tr")
