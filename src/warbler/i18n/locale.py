"""Locale resolution and locale-aware link building.

``LocaleRouter`` is the runtime-independent core shared by the server
and client navigators, the locale middleware and the template globals.
It answers three questions:

- which locale does this request/param/path name? (``resolve``)
- which locale does this visitor prefer? (``detect``)
- what path does this target have in that locale? (``render_link``)

Resolution fails closed: anything outside the supported set becomes the
default locale.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from warbler.errors import LocaleAlreadyResolved, UnrecognizedLocale
from warbler.i18n import context as locale_context
from warbler.i18n.config import LocaleConfig
from warbler.i18n.context import RequestLocaleContext
from warbler.i18n.links import RouteTargetLike, coerce_target, is_external, with_suffix
from warbler.routing.router import build_path

if TYPE_CHECKING:
    from warbler.http.request import Request
    from warbler.i18n.messages import Messages

logger = logging.getLogger("warbler.i18n")


class LocaleRouter:
    """Resolve locales and render locale-aware paths for one configuration.

    Usage::

        router = LocaleRouter(LocaleConfig(locales=("en", "tr"), default_locale="en"))
        router.resolve({"locale": "tr"})            # "tr"
        router.resolve({"locale": "de"})            # "en" (fail closed)
        router.render_link("/snippets/new", "tr")   # "/tr/snippets/new"
        router.render_link("/snippets/new", "en")   # "/snippets/new"
    """

    __slots__ = ("_by_lower", "config", "messages")

    def __init__(self, config: LocaleConfig, messages: Messages | None = None) -> None:
        self.config = config
        self.messages = messages
        self._by_lower = {locale.lower(): locale for locale in config.locales}

    # -- Resolution --

    def validate(self, value: object) -> str:
        """Return *value* if it is a supported locale.

        Raises ``UnrecognizedLocale`` otherwise.
        """
        if self.config.is_supported(value):
            return value  # type: ignore[return-value]
        raise UnrecognizedLocale(value)

    def resolve(self, source: Request | Mapping[str, Any] | str | None = None) -> str:
        """Determine the locale named by *source*, or the default.

        *source* may be:

        - ``None``: the locale already resolved for the current request,
          else the default locale.
        - a ``Request``: its ``locale`` path param, else the first
          segment of its raw path.
        - a mapping of route params: its ``locale`` entry.
        - a path (``"/tr/forum"``): its first segment.
        - a bare value (``"tr"``): the value itself.
        """
        if source is None:
            active = locale_context.get_locale_context()
            return active.locale if active is not None else self.config.default_locale

        candidate = self._candidate(source)
        if candidate is None:
            return self.config.default_locale
        try:
            return self.validate(candidate)
        except UnrecognizedLocale as exc:
            logger.debug("%s; using default %r", exc, self.config.default_locale)
            return self.config.default_locale

    def _candidate(self, source: Request | Mapping[str, Any] | str) -> object:
        from warbler.http.request import Request

        if isinstance(source, Request):
            value = source.path_params.get(self.config.param_name)
            if value is not None:
                return value
            return self.split_path(source.raw_path)[0]
        if isinstance(source, Mapping):
            return source.get(self.config.param_name)
        if isinstance(source, str) and source.startswith("/"):
            return self.split_path(source)[0]
        return source

    def split_path(self, path: str) -> tuple[str | None, str]:
        """Split a leading locale segment off *path*.

        ``"/tr/forum/new"`` -> ``("tr", "/forum/new")``;
        ``"/forum/new"`` -> ``(None, "/forum/new")``. Only exact,
        supported locale segments count.
        """
        head, sep, rest = path.lstrip("/").partition("/")
        if self.config.is_supported(head):
            return head, "/" + rest if sep else "/"
        return None, path or "/"

    def set_active_locale(self, locale: str) -> RequestLocaleContext:
        """Declare *locale* for the rest of the current render pass.

        Single assignment: repeating the resolved locale is a no-op,
        replacing it raises ``LocaleAlreadyResolved``. Unrecognized
        values resolve to the default first.
        """
        resolved = self.resolve(locale)
        active = locale_context.get_locale_context()
        if active is not None:
            if active.locale != resolved:
                raise LocaleAlreadyResolved(active.locale, resolved)
            return active

        raw_path = self._request_path()
        prefix, route_path = self.split_path(raw_path)
        context = RequestLocaleContext(
            locale=resolved,
            raw_path=raw_path,
            route_path=route_path,
            explicit=prefix == resolved,
        )
        locale_context.activate(context)
        return context

    @staticmethod
    def _request_path() -> str:
        from warbler.context import request_var

        request = request_var.get(None)
        return request.raw_path if request is not None else "/"

    # -- Detection --

    def negotiate(self, accepted: list[tuple[str, float]]) -> str | None:
        """Pick the best supported locale from weighted language tags.

        Tags match case-insensitively, then by primary subtag
        (``tr-TR`` -> ``tr``). ``*`` selects the default locale.
        """
        for tag, _ in accepted:
            lowered = tag.lower()
            if lowered == "*":
                return self.config.default_locale
            if lowered in self._by_lower:
                return self._by_lower[lowered]
            primary = lowered.split("-", 1)[0]
            if primary in self._by_lower:
                return self._by_lower[primary]
        return None

    def detect(self, request: Request) -> str | None:
        """Find the visitor's preferred locale: cookie, then ``Accept-Language``."""
        remembered = request.cookies.get(self.config.cookie_name)
        if self.config.is_supported(remembered):
            return remembered
        detected = self.negotiate(request.headers.get_weighted("accept-language"))
        if detected is not None:
            logger.debug("Detected locale %r for %s", detected, request.raw_path)
        return detected

    # -- Links --

    def localize(self, path: str, locale: str) -> str:
        """Apply the prefix policy to a locale-neutral *path*."""
        if self.config.omits_prefix(locale):
            return path
        return f"/{locale}" if path == "/" else f"/{locale}{path}"

    def render_link(self, target: RouteTargetLike, locale: str | None = None) -> str:
        """Produce the concrete path of *target* in *locale*.

        *locale* defaults to the current request's locale. An explicit
        but unsupported *locale* falls back to the default. Absolute
        URLs pass through untouched.

        Raises ``MissingRouteParameter`` if a placeholder has no value.
        """
        if isinstance(target, str) and is_external(target):
            return target
        route = coerce_target(target)
        path = build_path(route.path_template, route.params)
        resolved = self.resolve(None) if locale is None else self.resolve(locale)
        return with_suffix(self.localize(path, resolved), route)

    def current_locale(self) -> str:
        """The current request's locale, or the default while unresolved."""
        active = locale_context.get_locale_context()
        return active.locale if active is not None else self.config.default_locale
