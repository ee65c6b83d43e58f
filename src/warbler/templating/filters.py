"""Built-in template filters and the locale template globals.

Filters are registered on every warbler kida Environment. The locale
globals are registered when the app has ``i18n`` configured::

    <html lang="{{ current_locale() }}">
    <a href="{{ link('/users/{id}', id=user.id) }}">{{ t('Nav.profile') }}</a>
    {% for alt in alternates() %}
      <link rel="alternate" hreflang="{{ alt.locale }}" href="{{ alt.href }}">
    {% end %}
"""

import html
from dataclasses import replace
from typing import Any
from urllib.parse import quote, urlencode

from kida.template import Markup

from warbler.i18n.context import current_locale, current_path, get_locale_context
from warbler.i18n.links import coerce_target
from warbler.i18n.locale import LocaleRouter
from warbler.i18n.messages import get_translations


def attr(value: Any, name: str) -> str | Markup:
    """Output an HTML attribute when value is truthy, else empty string.

    Example:
        <a href="{{ href }}"{{ active | attr("aria-current") }}>
    """
    if not value:
        return ""
    return Markup(f' {name}="{html.escape(str(value))}"')


def qs(base: str, **params: Any) -> str:
    """Append query-string parameters to a URL path, skipping falsy values.

    Example:
        {{ link("/forum") | qs(page=page + 1, type=current_type) }}
        → "/tr/forum?page=3"   (when current_type is "")
    """
    filtered = {k: v for k, v in params.items() if v}
    if not filtered:
        return base
    encoded = urlencode({k: str(v) for k, v in filtered.items()}, quote_via=quote)
    sep = "&" if "?" in base else "?"
    return f"{base}{sep}{encoded}"


BUILTIN_FILTERS: dict[str, Any] = {
    "attr": attr,
    "qs": qs,
}


def locale_globals(router: LocaleRouter) -> dict[str, Any]:
    """Template globals bound to *router*.

    - ``link(target, locale=None, **params)``: locale-aware path; extra
      keyword arguments fill the target's placeholders.
    - ``current_locale()`` / ``current_path()``: the request's locale and
      raw path.
    - ``t(key, **params)``: translated message for the request's locale.
    - ``alternates()``: the current page in every supported locale, for
      ``hreflang`` tags and locale switchers.
    """

    def link(target: Any, locale: str | None = None, **params: Any) -> str:
        if params:
            base = coerce_target(target)
            target = replace(base, params={**base.params, **params})
        return router.render_link(target, locale)

    def t(key: str, **params: Any) -> str:
        if router.messages is None:
            return key
        return get_translations()(key, **params)

    def alternates() -> list[dict[str, str]]:
        context = get_locale_context()
        route_path = context.route_path if context is not None else "/"
        return [
            {"locale": locale, "href": router.localize(route_path, locale)}
            for locale in router.config.locales
        ]

    return {
        "link": link,
        "current_locale": current_locale,
        "current_path": current_path,
        "t": t,
        "alternates": alternates,
        "locales": router.config.locales,
    }
