"""Tests for warbler.middleware.guard: sign-in wall redirects."""

from typing import Any

import pytest

from warbler.app import App
from warbler.context import g
from warbler.errors import ConfigurationError
from warbler.http.request import Request
from warbler.http.response import Redirect
from warbler.i18n.config import LocaleConfig
from warbler.middleware.guard import GuardConfig, GuardMiddleware, safe_redirect_target
from warbler.testing import TestClient


async def _authenticate(request: Request) -> Any:
    return request.cookies.get("user")


def _app() -> App:
    app = App(i18n=LocaleConfig(locales=("en", "tr"), default_locale="en"))
    app.add_middleware(GuardMiddleware(GuardConfig(authenticate=_authenticate)))

    @app.route("/feed")
    def feed():
        return f"feed for {g.user}"

    @app.route("/feedback")
    def feedback():
        return "public"

    @app.route("/snippets/new", methods=["GET", "POST"])
    def new_snippet():
        return "form"

    @app.route("/login")
    def login(request: Request):
        return Redirect(safe_redirect_target(request))

    @app.route("/signup")
    def signup():
        return "signup"

    return app


class TestGuardConfig:
    def test_requires_authenticate(self) -> None:
        with pytest.raises(ConfigurationError, match="authenticate"):
            GuardMiddleware(GuardConfig())


class TestAnonymous:
    async def test_protected_redirects_to_login(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/feed")
        assert response.status == 307
        assert response.header("location") == "/login?redirect=%2Ffeed"

    async def test_login_redirect_is_localized(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/tr/snippets/new")
        assert response.header("location") == "/tr/login?redirect=%2Ftr%2Fsnippets%2Fnew"

    async def test_post_uses_see_other(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.post("/snippets/new", form={"title": "x"})
        assert response.status == 303

    async def test_prefix_match_is_per_segment(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/feedback")
        assert response.status == 200
        assert response.text == "public"

    async def test_auth_pages_open(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/signup")
        assert response.text == "signup"

    async def test_fragment_gets_hx_location(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.fragment("/tr/feed")
        assert response.status == 200
        assert response.header("hx-location") == "/tr/login?redirect=%2Ftr%2Ffeed"


class TestSignedIn:
    async def test_protected_page_served(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/feed", cookies={"user": "ayse"})
        assert response.status == 200
        assert response.text == "feed for ayse"

    async def test_auth_page_redirects_home(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/tr/signup", cookies={"user": "ayse"})
        assert response.status == 307
        assert response.header("location") == "/tr/feed"


class TestSafeRedirectTarget:
    async def test_follows_safe_target(self) -> None:
        app = App(i18n=LocaleConfig(locales=("en", "tr"), default_locale="en"))

        @app.route("/login")
        def login(request: Request):
            return Redirect(safe_redirect_target(request))

        async with TestClient(app) as client:
            response = await client.get("/tr/login?redirect=%2Ftr%2Fsnippets%2Fnew")
        assert response.status == 302
        assert response.header("location") == "/tr/snippets/new"

    async def test_unsafe_target_falls_back_to_localized_home(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        app = App(i18n=LocaleConfig(locales=("en", "tr"), default_locale="en"))

        @app.route("/login")
        def login(request: Request):
            return Redirect(safe_redirect_target(request))

        async with TestClient(app) as client:
            with caplog.at_level("WARNING", logger="warbler.server"):
                response = await client.get("/tr/login?redirect=//evil.com")
        assert response.header("location") == "/tr/feed"
        assert "Rejected unsafe redirect target" in caplog.text

    async def test_missing_target(self) -> None:
        app = App(i18n=LocaleConfig(locales=("en", "tr"), default_locale="en"))

        @app.route("/login")
        def login(request: Request):
            return Redirect(safe_redirect_target(request, fallback="/forum"))

        async with TestClient(app) as client:
            response = await client.get("/login")
        assert response.header("location") == "/forum"
