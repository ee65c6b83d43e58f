"""Tests for warbler.middleware.locale: prefix routing, canonical redirects, detection."""

from warbler.app import App
from warbler.http.request import Request
from warbler.i18n.config import LocaleConfig, PrefixPolicy
from warbler.i18n.context import current_path
from warbler.testing import TestClient


def _app(**overrides: object) -> App:
    config = LocaleConfig(locales=("en", "tr"), default_locale="en", **overrides)  # type: ignore[arg-type]
    app = App(i18n=config)

    @app.route("/forum", methods=["GET", "POST"])
    def forum(request: Request, locale: str):
        return f"{locale} {request.path} {current_path()}"

    @app.route("/")
    def home(locale: str):
        return f"home {locale}"

    @app.route("/api/status")
    def status(request: Request, locale: str):
        return f"{locale} {request.path}"

    return app


class TestPrefixRouting:
    async def test_prefixed_locale(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/tr/forum")
        assert response.status == 200
        assert response.text == "tr /forum /tr/forum"
        assert response.header("content-language") == "tr"

    async def test_unprefixed_is_default(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/forum")
        assert response.text == "en /forum /forum"
        assert response.header("content-language") == "en"

    async def test_bare_locale_prefix(self) -> None:
        async with TestClient(_app()) as client:
            assert (await client.get("/tr")).text == "home tr"
            assert (await client.get("/tr/")).text == "home tr"

    async def test_unknown_prefix_is_not_a_locale(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/de/forum")
        assert response.status == 404


class TestCanonicalRedirects:
    async def test_default_prefix_removed(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/en/forum")
        assert response.status == 307
        assert response.header("location") == "/forum"

    async def test_default_prefix_root(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/en")
        assert response.header("location") == "/"

    async def test_query_preserved(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/en/forum?type=question&page=2")
        assert response.header("location") == "/forum?type=question&page=2"

    async def test_post_not_redirected(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.post("/en/forum", form={"title": "hi"})
        assert response.status == 200
        assert response.text == "en /forum /en/forum"

    async def test_fragment_gets_hx_location(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.fragment("/en/forum")
        assert response.status == 200
        assert response.header("hx-location") == "/forum"

    async def test_always_prefix_adds_default(self) -> None:
        async with TestClient(_app(prefix_policy=PrefixPolicy.ALWAYS)) as client:
            redirected = await client.get("/forum")
            served = await client.get("/en/forum")
        assert redirected.status == 307
        assert redirected.header("location") == "/en/forum"
        assert served.status == 200
        assert served.text == "en /forum /en/forum"

    async def test_head_redirected(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.head("/en/forum")
        assert response.status == 307
        assert response.body == b""


class TestDetection:
    async def test_accept_language_redirects_and_remembers(self) -> None:
        async with TestClient(_app(detect=True)) as client:
            response = await client.get(
                "/forum", headers={"Accept-Language": "tr-TR,tr;q=0.9,en;q=0.5"}
            )
        assert response.status == 307
        assert response.header("location") == "/tr/forum"
        assert response.header("set-cookie") == "locale=tr; Max-Age=31536000; Path=/; SameSite=Lax"

    async def test_cookie_wins_over_header(self) -> None:
        async with TestClient(_app(detect=True)) as client:
            response = await client.get(
                "/forum",
                headers={"Accept-Language": "tr"},
                cookies={"locale": "en"},
            )
        assert response.status == 200
        assert response.text == "en /forum /forum"
        assert response.header("set-cookie") is None

    async def test_remembered_locale_not_rewritten(self) -> None:
        async with TestClient(_app(detect=True)) as client:
            response = await client.get("/forum", cookies={"locale": "tr"})
        assert response.header("location") == "/tr/forum"
        assert response.header("set-cookie") is None

    async def test_explicit_default_prefix_updates_cookie(self) -> None:
        async with TestClient(_app(detect=True)) as client:
            response = await client.get("/en/forum", cookies={"locale": "tr"})
        assert response.header("location") == "/forum"
        assert response.header("set-cookie") is not None
        assert response.header("set-cookie").startswith("locale=en;")

    async def test_prefixed_visit_remembered(self) -> None:
        async with TestClient(_app(detect=True)) as client:
            response = await client.get("/tr/forum")
        assert response.status == 200
        assert response.header("set-cookie").startswith("locale=tr;")

    async def test_detection_off_by_default(self) -> None:
        async with TestClient(_app()) as client:
            response = await client.get("/forum", accept_language="tr")
        assert response.status == 200
        assert response.header("set-cookie") is None

    async def test_unsupported_cookie_ignored(self) -> None:
        async with TestClient(_app(detect=True)) as client:
            response = await client.get("/forum", cookies={"locale": "xx"})
        assert response.status == 200
        assert response.text == "en /forum /forum"


class TestExcludedPaths:
    async def test_excluded_path_untouched(self) -> None:
        async with TestClient(_app(detect=True)) as client:
            response = await client.get("/api/status", accept_language="tr")
        assert response.status == 200
        assert response.text == "en /api/status"
        assert response.header("content-language") is None
        assert response.header("set-cookie") is None
