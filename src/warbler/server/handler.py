"""ASGI handler: translates ASGI scope/messages to warbler types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, opens the request and locale scopes, dispatches
through middleware and routing, and sends the Response back through
ASGI send().
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from kida import Environment

from warbler._internal.asgi import Receive, Scope, Send
from warbler._internal.invoke import invoke
from warbler.context import close_request_scope, open_request_scope
from warbler.errors import HTTPError, NavigationRedirect
from warbler.http.request import Request
from warbler.http.response import Response, redirect_response
from warbler.i18n import context as locale_context
from warbler.i18n.locale import LocaleRouter
from warbler.middleware.protocol import AnyResponse, Next
from warbler.routing.route import RouteMatch
from warbler.routing.router import Router
from warbler.server.errors import handle_http_error, handle_internal_error
from warbler.server.negotiation import negotiate
from warbler.server.sender import send_response

logger = logging.getLogger("warbler.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    kida_env: Environment | None = None,
    debug: bool,
    providers: dict[type, Callable[..., Any]] | None = None,
    locale_router: LocaleRouter | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    request_tokens = open_request_scope(request)
    locale_tokens = locale_context.open_scope(locale_router)

    try:

        async def dispatch(req: Request) -> AnyResponse:
            match = router.match(req.method, req.path)
            return await _invoke_handler(
                match,
                req,
                kida_env=kida_env,
                providers=providers,
                locale_router=locale_router,
            )

        handler = dispatch
        for mw in reversed(middleware):
            outer = handler

            async def make_next(req: Request, _mw: Any = mw, _next: Next = outer) -> Response:
                return await _mw(req, _next)

            handler = make_next

        response = await handler(request)

    except NavigationRedirect as exc:
        logger.debug("%s %s -> %d %s", request.method, request.raw_path, exc.status, exc.url)
        response = redirect_response(exc.url, exc.status, fragment=request.is_fragment)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, kida_env, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, kida_env, debug)
    finally:
        locale_context.close_scope(locale_tokens)
        close_request_scope(request_tokens)

    await send_response(response, send, method=request.method)


async def _invoke_handler(
    match: RouteMatch,
    request: Request,
    *,
    kida_env: Environment | None = None,
    providers: dict[type, Callable[..., Any]] | None = None,
    locale_router: LocaleRouter | None = None,
) -> AnyResponse:
    """Call the matched route handler, converting path params and return value."""
    handler = match.route.handler
    request = request.with_path_params(match.path_params)

    kwargs = _build_handler_kwargs(
        handler,
        request,
        match.path_params,
        providers,
        locale_router=locale_router,
    )

    result = await invoke(handler, **kwargs)
    return negotiate(result, kida_env=kida_env)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
    providers: dict[type, Callable[..., Any]] | None = None,
    *,
    locale_router: LocaleRouter | None = None,
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs from request + path params.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. The locale parameter: a ``{locale}`` placeholder value checked
       against the supported locales, else the request locale
    3. Path parameters (by name, with type conversion)
    4. Service providers (by type annotation via ``app.provide()``,
       e.g. ``Navigator``)
    """
    sig = inspect.signature(handler, eval_str=True)
    locale_param = locale_router.config.param_name if locale_router is not None else None
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif locale_router is not None and name == locale_param:
            if name in path_params:
                kwargs[name] = locale_router.resolve({name: path_params[name]})
            else:
                kwargs[name] = locale_context.current_locale()
        elif name in path_params:
            value = path_params[name]
            if param.annotation not in (inspect.Parameter.empty, str):
                try:
                    kwargs[name] = param.annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value
        elif (
            providers
            and param.annotation is not inspect.Parameter.empty
            and param.annotation in providers
        ):
            kwargs[name] = providers[param.annotation]()

    return kwargs
