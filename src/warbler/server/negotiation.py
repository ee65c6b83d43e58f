"""Content negotiation: maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

import json as json_module
from typing import Any

from kida import Environment

from warbler.errors import ConfigurationError
from warbler.http.response import Redirect, Response
from warbler.templating.integration import render_fragment, render_template
from warbler.templating.returns import Fragment, InlineTemplate, Template


def _html_response(body: str) -> Response:
    return Response(body=body, content_type="text/html; charset=utf-8")


def _require_env(kida_env: Environment | None, kind: str) -> Environment:
    if kida_env is None:
        msg = (
            f"{kind} return type requires kida integration. "
            "Ensure a template_dir is configured in AppConfig."
        )
        raise ConfigurationError(msg)
    return kida_env


def negotiate(value: Any, *, kida_env: Environment | None = None) -> Response:
    """Convert a route handler's return value to a Response.

    Dispatch order:

    1. ``Response``         -> pass through
    2. ``Redirect``         -> status with Location header
    3. ``Template``         -> render via kida
    4. ``InlineTemplate``   -> render string source via kida
    5. ``Fragment``         -> render one block via kida
    6. ``str``              -> 200, text/html
    7. ``dict`` / ``list``  -> 200, application/json
    8. ``(value, int)``     -> negotiate value, override status
    9. ``(value, int, dict)`` -> negotiate value, override status + headers
    """
    match value:
        case Response():
            return value
        case Redirect():
            return (
                Response(body="")
                .with_status(value.status)
                .with_header("Location", value.url)
                .with_headers(dict(value.headers))
            )
        case Template():
            env = _require_env(kida_env, "Template")
            return _html_response(render_template(env, value))
        case InlineTemplate():
            env = kida_env or Environment()
            return _html_response(env.from_string(value.source).render(value.context))
        case Fragment():
            env = _require_env(kida_env, "Fragment")
            return _html_response(render_fragment(env, value))
        case str():
            return _html_response(value)
        case dict() | list():
            return Response(
                body=json_module.dumps(value, default=str),
                content_type="application/json; charset=utf-8",
            )
        case (inner, int() as status):
            return negotiate(inner, kida_env=kida_env).with_status(status)
        case (inner, int() as status, dict() as headers):
            return negotiate(inner, kida_env=kida_env).with_status(status).with_headers(headers)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return str, dict, list, Template, InlineTemplate, Fragment, "
                "Response, or Redirect."
            )
            raise TypeError(msg)
