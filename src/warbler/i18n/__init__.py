"""Locale routing: resolution, locale-aware links and navigation.

    from warbler.i18n import LocaleConfig, LocaleRouter, RouteTarget

    router = LocaleRouter(LocaleConfig(locales=("en", "tr"), default_locale="en"))
    router.render_link(RouteTarget("/users/{id}", {"id": "42"}), "tr")   # "/tr/users/42"

Modules:
    config      -- LocaleConfig, PrefixPolicy
    context     -- request-scoped locale state (ContextVar)
    links       -- RouteTarget and target coercion
    locale      -- LocaleRouter (resolve, detect, render_link)
    navigation  -- Navigator protocol, ServerNavigator
    client      -- ClientNavigator (history, scroll, last-write-wins)
    messages    -- message catalogs and translators
"""

from warbler.i18n.client import ClientNavigator, DocumentLang, History, HistoryEntry, View
from warbler.i18n.config import LocaleConfig, PrefixPolicy
from warbler.i18n.context import RequestLocaleContext, current_locale, current_path
from warbler.i18n.links import RouteTarget, RouteTargetLike
from warbler.i18n.locale import LocaleRouter
from warbler.i18n.messages import Messages, Translator, get_translations
from warbler.i18n.navigation import Navigator, ServerNavigator

__all__ = [
    "ClientNavigator",
    "DocumentLang",
    "History",
    "HistoryEntry",
    "LocaleConfig",
    "LocaleRouter",
    "Messages",
    "Navigator",
    "PrefixPolicy",
    "RequestLocaleContext",
    "RouteTarget",
    "RouteTargetLike",
    "ServerNavigator",
    "Translator",
    "View",
    "current_locale",
    "current_path",
    "get_translations",
]
