"""Tests for warbler.context: request-scoped ContextVar and g namespace."""

import asyncio
from typing import Any

import pytest

from warbler.app import App
from warbler.context import (
    _RequestGlobals,
    close_request_scope,
    g,
    get_request,
    open_request_scope,
    request_var,
)
from warbler.http.request import Request
from warbler.i18n import context as locale_context
from warbler.i18n.config import LocaleConfig
from warbler.middleware.protocol import Next
from warbler.testing import TestClient


def _make_request(path: str = "/test") -> Request:
    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": b"", "more_body": False}

    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "query_string": b"",
        "http_version": "1.1",
    }
    return Request.from_asgi(scope, receive)


class TestRequestVar:
    def test_get_request_raises_outside_context(self) -> None:
        with pytest.raises(LookupError):
            get_request()

    def test_set_and_get_request(self) -> None:
        request = _make_request()
        token = request_var.set(request)
        try:
            assert get_request() is request
            assert get_request().path == "/test"
        finally:
            request_var.reset(token)

    def test_scope_binds_request_and_fresh_g(self) -> None:
        request = _make_request("/tr/feed")
        tokens = open_request_scope(request)
        try:
            assert get_request() is request
            g.user = "alice"
            assert g.user == "alice"
        finally:
            close_request_scope(tokens)

        with pytest.raises(LookupError):
            get_request()


class TestRequestGlobals:
    def test_set_and_get_attribute(self) -> None:
        ns = _RequestGlobals()
        ns.user = "alice"
        assert ns.user == "alice"

    def test_missing_attribute_raises(self) -> None:
        ns = _RequestGlobals()
        with pytest.raises(AttributeError, match="has no attribute 'missing'"):
            _ = ns.missing

    def test_delete_attribute(self) -> None:
        ns = _RequestGlobals()
        ns.foo = "bar"
        del ns.foo
        with pytest.raises(AttributeError, match="has no attribute 'foo'"):
            _ = ns.foo

    def test_delete_missing_raises(self) -> None:
        ns = _RequestGlobals()
        with pytest.raises(AttributeError, match="has no attribute 'nope'"):
            del ns.nope

    def test_contains_and_get(self) -> None:
        ns = _RequestGlobals()
        ns.x = 1
        assert "x" in ns
        assert "y" not in ns
        assert ns.get("y", 42) == 42


class TestLocaleScope:
    def test_current_locale_outside_scope_raises(self) -> None:
        with pytest.raises(LookupError, match="No locale context"):
            locale_context.current_locale()

    def test_current_path_outside_request_raises(self) -> None:
        with pytest.raises(LookupError):
            locale_context.current_path()

    def test_current_path_falls_back_to_request(self) -> None:
        tokens = open_request_scope(_make_request("/tr/forum"))
        try:
            assert locale_context.current_path() == "/tr/forum"
        finally:
            close_request_scope(tokens)


class TestContextInRequestPipeline:
    async def test_request_var_available_in_handler(self) -> None:
        app = App()

        @app.route("/ctx")
        def handler():
            return f"path={get_request().path}"

        async with TestClient(app) as client:
            response = await client.get("/ctx")
            assert response.status == 200
            assert response.text == "path=/ctx"

    async def test_g_not_leaked_between_requests(self) -> None:
        app = App()

        async def set_if_first(request: Request, next: Next):
            if request.path == "/first":
                g.secret = "leaked"
            return await next(request)

        app.add_middleware(set_if_first)

        @app.route("/first")
        def first():
            return f"secret={g.secret}"

        @app.route("/second")
        def second():
            return f"has_secret={'secret' in g}"

        async with TestClient(app) as client:
            assert (await client.get("/first")).text == "secret=leaked"
            assert (await client.get("/second")).text == "has_secret=False"

    async def test_locale_reset_after_error(self) -> None:
        app = App(i18n=LocaleConfig(locales=("en", "tr"), default_locale="en"))

        @app.route("/boom")
        def boom():
            msg = "handler error"
            raise RuntimeError(msg)

        @app.route("/where")
        def where(locale: str):
            return locale

        async with TestClient(app) as client:
            assert (await client.get("/tr/boom")).status == 500
            response = await client.get("/where")
            assert response.text == "en"

        assert locale_context.get_locale_context() is None

    async def test_concurrent_requests_keep_their_own_locale(self) -> None:
        app = App(i18n=LocaleConfig(locales=("en", "tr"), default_locale="en"))
        both_inside = asyncio.Event()
        inside: list[str] = []

        @app.route("/slow")
        async def slow(locale: str):
            inside.append(locale)
            if len(inside) == 4:
                both_inside.set()
            await both_inside.wait()
            return f"{locale}:{locale_context.current_locale()}:{locale_context.current_path()}"

        async with TestClient(app) as client:
            responses = await asyncio.gather(
                client.get("/tr/slow"),
                client.get("/slow"),
                client.get("/tr/slow"),
                client.get("/slow"),
            )

        assert sorted(inside) == ["en", "en", "tr", "tr"]
        assert [r.text for r in responses] == [
            "tr:tr:/tr/slow",
            "en:en:/slow",
            "tr:tr:/tr/slow",
            "en:en:/slow",
        ]
        assert [r.header("content-language") for r in responses] == ["tr", "en", "tr", "en"]
        assert locale_context.get_locale_context() is None
