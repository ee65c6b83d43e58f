"""Request-scoped state held in ContextVars.

- ``request_var``: the request being handled by the current task.
- ``g``: a per-request scratch namespace (the guard middleware stores
  the visitor's session state there for handlers and templates).

The request pipeline opens both before dispatch and resets them when the
response has been produced, so nothing leaks between requests that share
a worker task.
"""

from contextvars import ContextVar, Token
from typing import Any

from warbler.http.request import Request

request_var: ContextVar[Request] = ContextVar("warbler_request")
"""The current request. Set by the request pipeline before dispatch."""

_g_store: ContextVar[dict[str, Any] | None] = ContextVar("warbler_g", default=None)


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` outside a request.
    """
    return request_var.get()


class _RequestGlobals:
    """A mutable namespace scoped to the current request.

    Usage::

        from warbler.context import g

        g.user = user          # in middleware
        g.get("user")          # in a handler, None if unset
    """

    __slots__ = ()

    @staticmethod
    def _get_dict() -> dict[str, Any]:
        d = _g_store.get()
        if d is None:
            d = {}
            _g_store.set(d)
        return d

    def __getattr__(self, name: str) -> Any:
        try:
            return self._get_dict()[name]
        except KeyError:
            msg = f"'g' has no attribute {name!r} in the current request scope"
            raise AttributeError(msg) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._get_dict()[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._get_dict()[name]
        except KeyError:
            msg = f"'g' has no attribute {name!r} in the current request scope"
            raise AttributeError(msg) from None

    def __contains__(self, name: str) -> bool:
        return name in self._get_dict()

    def get(self, name: str, default: Any = None) -> Any:
        return self._get_dict().get(name, default)

    def __repr__(self) -> str:
        return f"<g {self._get_dict()!r}>"


g = _RequestGlobals()


def open_request_scope(request: Request) -> tuple[Token[Request], Token[dict[str, Any] | None]]:
    """Bind *request* and a fresh ``g`` namespace to the current context."""
    return request_var.set(request), _g_store.set({})


def close_request_scope(tokens: tuple[Token[Request], Token[dict[str, Any] | None]]) -> None:
    """Undo ``open_request_scope``."""
    request_token, g_token = tokens
    _g_store.reset(g_token)
    request_var.reset(request_token)
