"""Tests for warbler.server.negotiation: content negotiation dispatch."""

import json
from pathlib import Path

import pytest
from kida import Environment, FileSystemLoader

from warbler.errors import ConfigurationError
from warbler.http.response import Redirect, Response
from warbler.server.negotiation import negotiate
from warbler.templating.returns import Fragment, Template

TEMPLATES_DIR = Path(__file__).parent / "templates"


@pytest.fixture
def kida_env() -> Environment:
    return Environment(loader=FileSystemLoader(str(TEMPLATES_DIR)))


class TestNegotiatePassthrough:
    def test_response_passthrough(self) -> None:
        original = Response(body="hello", status=201)
        assert negotiate(original) is original

    def test_redirect(self) -> None:
        result = negotiate(Redirect("/tr/login"))
        assert result.status == 302
        assert ("Location", "/tr/login") in result.headers

    def test_redirect_extra_headers(self) -> None:
        result = negotiate(Redirect("/feed", status=303, headers=(("X-Reason", "saved"),)))
        assert result.status == 303
        assert result.header("x-reason") == "saved"


class TestNegotiateTemplateTypes:
    def test_template_rendering(self, kida_env: Environment) -> None:
        result = negotiate(Template("plain.html", title="Forum", message="hi"), kida_env=kida_env)
        assert result.status == 200
        assert "text/html" in result.content_type
        assert "<h1>Forum</h1>" in result.text
        assert "<p>hi</p>" in result.text

    def test_fragment_rendering(self, kida_env: Environment) -> None:
        result = negotiate(
            Fragment("plain.html", "body", title="ignored", message="only block"),
            kida_env=kida_env,
        )
        assert "<p>only block</p>" in result.text
        assert "<h1>" not in result.text

    def test_inline_template_without_env(self) -> None:
        result = negotiate(Template.inline("<b>{{ name }}</b>", name="ayse"))
        assert result.text == "<b>ayse</b>"

    def test_template_requires_env(self) -> None:
        with pytest.raises(ConfigurationError, match="requires kida integration"):
            negotiate(Template("plain.html"))

    def test_fragment_requires_env(self) -> None:
        with pytest.raises(ConfigurationError):
            negotiate(Fragment("plain.html", "body"))


class TestNegotiatePrimitives:
    def test_str(self) -> None:
        result = negotiate("hello")
        assert result.text == "hello"
        assert result.content_type == "text/html; charset=utf-8"

    def test_dict(self) -> None:
        result = negotiate({"locale": "tr"})
        assert result.content_type == "application/json; charset=utf-8"
        assert json.loads(result.text) == {"locale": "tr"}

    def test_list(self) -> None:
        assert json.loads(negotiate(["en", "tr"]).text) == ["en", "tr"]

    def test_status_tuple(self) -> None:
        result = negotiate(("Created", 201))
        assert result.status == 201
        assert result.text == "Created"

    def test_status_headers_tuple(self) -> None:
        result = negotiate(("Busy", 503, {"Retry-After": "5"}))
        assert result.status == 503
        assert result.header("retry-after") == "5"

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError, match="Cannot convert int"):
            negotiate(42)
