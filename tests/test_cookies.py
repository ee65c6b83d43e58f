"""Tests for warbler.http.cookies: parse_cookies + SetCookie."""

from warbler.http.cookies import SetCookie, parse_cookies


class TestParseCookies:
    def test_empty_string(self) -> None:
        assert parse_cookies("") == {}

    def test_multiple_cookies(self) -> None:
        assert parse_cookies("sid=abc; locale=tr") == {"sid": "abc", "locale": "tr"}

    def test_whitespace_handling(self) -> None:
        assert parse_cookies("  sid = abc ;  locale = tr  ") == {"sid": "abc", "locale": "tr"}

    def test_value_with_equals(self) -> None:
        assert parse_cookies("token=abc=def=") == {"token": "abc=def="}

    def test_no_equals_ignored(self) -> None:
        assert parse_cookies("sid=abc; broken; locale=en") == {"sid": "abc", "locale": "en"}

    def test_first_occurrence_wins(self) -> None:
        assert parse_cookies("locale=tr; locale=en") == {"locale": "tr"}

    def test_percent_decoded(self) -> None:
        assert parse_cookies("name=ali%20veli") == {"name": "ali veli"}


class TestSetCookie:
    def test_defaults(self) -> None:
        value = SetCookie(name="sid", value="abc").to_header_value()
        assert value == "sid=abc; Path=/; HttpOnly; SameSite=Lax"

    def test_locale_cookie(self) -> None:
        value = SetCookie(
            name="locale", value="tr", max_age=31536000, httponly=False
        ).to_header_value()
        assert value == "locale=tr; Max-Age=31536000; Path=/; SameSite=Lax"

    def test_secure_and_domain(self) -> None:
        value = SetCookie(
            name="sid", value="x", domain="example.com", secure=True, samesite="strict"
        ).to_header_value()
        assert "Domain=example.com" in value
        assert "Secure" in value
        assert "SameSite=Strict" in value

    def test_value_is_quoted(self) -> None:
        assert SetCookie(name="n", value="a b;c").to_header_value().startswith("n=a%20b%3Bc;")
