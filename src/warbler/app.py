"""Warbler application class.

Mutable during setup (route registration, middleware, filters).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import inspect
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from kida import Environment

from warbler._internal.asgi import Receive, Scope, Send
from warbler._internal.types import ErrorHandler, Handler
from warbler.config import AppConfig
from warbler.i18n.config import LocaleConfig
from warbler.i18n.locale import LocaleRouter
from warbler.i18n.messages import Messages
from warbler.i18n.navigation import Navigator, ServerNavigator
from warbler.middleware.locale import LocaleMiddleware
from warbler.middleware.protocol import Middleware
from warbler.routing.route import Route
from warbler.routing.router import Router
from warbler.server.handler import handle_request
from warbler.templating.filters import locale_globals
from warbler.templating.integration import create_environment


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    name: str | None


class App:
    """The warbler application.

    Mutable during setup (route registration, middleware, filters).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.

    With ``i18n`` configured, the app resolves a locale for every
    request before any other middleware runs, serves each route under
    every locale prefix, and makes the locale available to handlers
    (a ``locale`` parameter, a ``Navigator`` parameter) and templates
    (``link``, ``current_locale``, ``current_path``, ``t``)::

        app = App(
            AppConfig(template_dir="templates"),
            i18n=LocaleConfig(locales=("en", "tr"), default_locale="en"),
        )

        @app.route("/forum/new")
        def new_thread(locale: str):
            return Template("forum/new.html", locale=locale)

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app.
    """

    __slots__ = (
        "_custom_kida_env",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_locale_router",
        "_middleware",
        "_middleware_list",
        "_navigator",
        "_pending_routes",
        "_providers",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_template_filters",
        "_template_globals",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        i18n: LocaleConfig | None = None,
        messages: Messages | None = None,
        kida_env: Environment | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_routes: list[_PendingRoute] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._template_filters: dict[str, Callable[..., Any]] = {}
        self._template_globals: dict[str, Any] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._providers: dict[type, Callable[..., Any]] = {}
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._custom_kida_env: Environment | None = kida_env

        # Locale layer; catalogs load eagerly
        self._locale_router: LocaleRouter | None = None
        self._navigator: ServerNavigator | None = None
        if i18n is not None:
            if messages is None and i18n.messages_dir is not None:
                messages = Messages.from_directory(
                    i18n.messages_dir, i18n.locales, i18n.default_locale
                )
            self._locale_router = LocaleRouter(i18n, messages)
            navigator = ServerNavigator(self._locale_router)
            self._navigator = navigator
            self._providers[Navigator] = lambda: navigator
            self._providers[ServerNavigator] = lambda: navigator

        # Compiled state, set during _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._kida_env: Environment | None = None

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: Locale-neutral URL path pattern. Use ``{param}`` for path
                parameters. With i18n configured the route also answers
                under every locale prefix (``/tr/...``).
            methods: HTTP methods. Defaults to ``["GET"]``.
            name: Optional route name for ``url_for()``.
        """

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, name))
            return func

        return decorator

    # -- Service injection --

    def provide(self, annotation: type, factory: Callable[..., Any]) -> None:
        """Register a provider factory for dependency injection.

        When a handler parameter's type annotation matches *annotation*,
        warbler calls *factory* (with no arguments) and injects the result::

            app.provide(SnippetStore, get_store)

            def show(id: int, store: SnippetStore): ...
        """
        self._check_not_frozen()
        self._providers[annotation] = factory

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator."""

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline.

        With i18n configured, ``LocaleMiddleware`` always runs first, so
        every added middleware sees a resolved locale.
        """
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Template integration --

    def template_filter(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template filter."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_filters[name or func.__name__] = func
            return func

        return decorator

    def template_global(
        self,
        name: str | None = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a kida template global."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._template_globals[name or func.__name__] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Locale layer --

    @property
    def locale_router(self) -> LocaleRouter:
        """The app's locale router. Raises ``LookupError`` without i18n."""
        if self._locale_router is None:
            msg = "This app has no i18n configuration. Pass App(i18n=LocaleConfig(...))."
            raise LookupError(msg)
        return self._locale_router

    @property
    def navigator(self) -> ServerNavigator:
        """The server-side navigator injected into handlers."""
        if self._navigator is None:
            msg = "This app has no i18n configuration. Pass App(i18n=LocaleConfig(...))."
            raise LookupError(msg)
        return self._navigator

    def url_for(self, name: str, /, locale: str | None = None, **params: object) -> str:
        """Build the path of the route called *name*.

        With i18n configured the path is localized for *locale*, or for
        the current request's locale when omitted.

        Raises:
            KeyError: If no route has that name.
            MissingRouteParameter: If a placeholder has no value.
        """
        self._ensure_frozen()
        assert self._router is not None
        path = self._router.url_for(name, **params)
        if self._locale_router is None:
            return path
        router = self._locale_router
        return router.localize(path, router.resolve(locale))

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce (``pip install warbler[server]``).

        Single worker, with auto-reload when ``config.debug`` is on.
        """
        from pounce.config import ServerConfig
        from pounce.server import Server

        self._ensure_frozen()
        server_config = ServerConfig(
            host=host or self.config.host,
            port=port or self.config.port,
            workers=1,
            reload=self.config.debug,
        )
        Server(server_config, self).run()

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes
        to the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._router is not None

        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            kida_env=self._kida_env,
            debug=self.config.debug,
            providers=self._providers or None,
            locale_router=self._locale_router,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request), then
        runs registered startup/shutdown hooks and signals completion
        back to the server.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        # 1. Compile route table
        router = Router()
        for pending in self._pending_routes:
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            router.add(Route(pending.path, pending.handler, methods, pending.name))
        router.compile()
        self._router = router

        # 2. Capture middleware as an immutable tuple, locale resolution first
        middleware_list: list[Callable[..., Any]] = list(self._middleware_list)
        if self._locale_router is not None:
            middleware_list.insert(0, LocaleMiddleware(self._locale_router))
        self._middleware = tuple(middleware_list)

        # 3. Template globals: locale helpers, then user globals
        globals_: dict[str, Any] = {}
        if self._locale_router is not None:
            globals_.update(locale_globals(self._locale_router))
            globals_["url_for"] = self.url_for
        globals_.update(self._template_globals)

        # 4. Initialize kida environment
        if self._custom_kida_env is not None:
            self._kida_env = self._custom_kida_env
            if self._template_filters:
                self._kida_env.update_filters(self._template_filters)
            for name, value in globals_.items():
                self._kida_env.add_global(name, value)
        else:
            self._kida_env = create_environment(self.config, self._template_filters, globals_)

        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware, and filters before calling app.run()."
            )
            raise RuntimeError(msg)
