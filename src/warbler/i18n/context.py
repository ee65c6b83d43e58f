"""Request-scoped locale state via ContextVar.

Each request gets its own scope, opened by the ASGI handler and closed
after dispatch. Inside it the locale moves once from unresolved to
resolved, usually in ``LocaleMiddleware``, and stays there.

``ContextVar`` is task-local under asyncio, so concurrent requests never
see each other's locale. No locks needed.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from warbler.i18n.locale import LocaleRouter


@dataclass(frozen=True, slots=True)
class RequestLocaleContext:
    """The locale resolved for one render pass.

    Attributes:
        locale: The resolved locale.
        raw_path: Request path as received, including any locale prefix.
        route_path: Path with the locale prefix removed, as routed.
        explicit: True when the locale came from the path itself rather
            than from detection or the default.
    """

    locale: str
    raw_path: str
    route_path: str
    explicit: bool = False


_context_var: ContextVar[RequestLocaleContext | None] = ContextVar(
    "warbler_locale", default=None
)
_router_var: ContextVar[LocaleRouter | None] = ContextVar("warbler_locale_router", default=None)

type ScopeTokens = tuple[Token[RequestLocaleContext | None], Token[LocaleRouter | None]]


def open_scope(router: LocaleRouter | None = None) -> ScopeTokens:
    """Start an unresolved locale scope for a new request."""
    return _context_var.set(None), _router_var.set(router)


def close_scope(tokens: ScopeTokens) -> None:
    """Discard the request's locale state."""
    context_token, router_token = tokens
    _context_var.reset(context_token)
    _router_var.reset(router_token)


def activate(context: RequestLocaleContext) -> None:
    """Record the resolved locale. Callers enforce single assignment."""
    _context_var.set(context)


def get_locale_context() -> RequestLocaleContext | None:
    """Return the current request's locale context, or ``None`` if unresolved."""
    return _context_var.get()


def get_active_router() -> LocaleRouter | None:
    """Return the locale router bound to the current request, if any."""
    return _router_var.get()


def current_locale() -> str:
    """Return the locale governing the current render pass.

    Falls back to the active router's default locale while the request
    is still unresolved. Raises ``LookupError`` outside any locale scope.
    """
    context = _context_var.get()
    if context is not None:
        return context.locale
    router = _router_var.get()
    if router is not None:
        return router.config.default_locale
    msg = "No locale context. Configure App(i18n=LocaleConfig(...)) or call set_active_locale()."
    raise LookupError(msg)


def current_path() -> str:
    """Return the raw path of the current render pass, prefix included.

    Raises ``LookupError`` outside a request.
    """
    context = _context_var.get()
    if context is not None:
        return context.raw_path
    from warbler.context import get_request

    return get_request().raw_path
