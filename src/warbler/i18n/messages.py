"""Message catalogs and translators.

Catalogs are nested JSON objects, one file per locale
(``messages/en.json``, ``messages/tr.json``). Keys are dotted paths into
the nesting; ``{name}`` placeholders are interpolated at lookup time.

Lookup order for a key: the requested locale's catalog, then the default
locale's catalog, then the key itself (so a missing translation shows up
as ``"Forum.title"`` on the page instead of failing the render).
"""

import json
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from warbler.errors import ConfigurationError

logger = logging.getLogger("warbler.i18n")

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def _lookup(catalog: Mapping[str, Any] | None, keys: list[str]) -> str | None:
    node: Any = catalog
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node if isinstance(node, str) else None


def interpolate(message: str, params: Mapping[str, object]) -> str:
    """Replace ``{name}`` placeholders; unknown names are left intact."""
    if not params:
        return message
    return _PLACEHOLDER.sub(
        lambda m: str(params[m.group(1)]) if m.group(1) in params else m.group(0),
        message,
    )


class Translator:
    """Translate keys within one namespace for one locale.

    Usage::

        t = messages.translator("tr", "Forum")
        t("title")                      # Forum.title in tr, else en
        t("replies", count=3)           # "{count} replies" -> "3 replies"
    """

    __slots__ = ("_fallback", "_namespace", "_primary", "locale")

    def __init__(
        self,
        locale: str,
        namespace: str,
        primary: Mapping[str, Any] | None,
        fallback: Mapping[str, Any] | None,
    ) -> None:
        self.locale = locale
        self._namespace = [part for part in namespace.split(".") if part]
        self._primary = primary
        self._fallback = fallback

    def _find(self, key: str) -> str | None:
        keys = [*self._namespace, *key.split(".")]
        found = _lookup(self._primary, keys)
        if found is None and self._fallback is not self._primary:
            found = _lookup(self._fallback, keys)
        return found

    def has(self, key: str) -> bool:
        """True if *key* has a message in this locale or the fallback."""
        return self._find(key) is not None

    def __call__(self, key: str, /, **params: object) -> str:
        message = self._find(key)
        if message is None:
            logger.debug("Missing message %r for locale %r", key, self.locale)
            message = key
        return interpolate(message, params)


class Messages:
    """Message catalogs for every supported locale.

    Usage::

        messages = Messages.from_directory("messages", ("en", "tr"), "en")
        messages.translator("tr", "Snippets")("new")
    """

    __slots__ = ("_catalogs", "default_locale")

    def __init__(self, catalogs: Mapping[str, Mapping[str, Any]], default_locale: str) -> None:
        self._catalogs = dict(catalogs)
        self.default_locale = default_locale

    @classmethod
    def from_directory(
        cls,
        directory: str | Path,
        locales: tuple[str, ...],
        default_locale: str,
    ) -> "Messages":
        """Load ``{locale}.json`` for each locale from *directory*.

        The default locale's catalog is required; other locales fall back
        to it when their file is absent.

        Raises:
            ConfigurationError: If the default catalog is missing or a
                catalog is not a JSON object.
        """
        directory = Path(directory)
        catalogs: dict[str, Mapping[str, Any]] = {}
        for locale in locales:
            path = directory / f"{locale}.json"
            if not path.is_file():
                if locale == default_locale:
                    msg = f"Missing message catalog for default locale: {path}"
                    raise ConfigurationError(msg)
                logger.warning("No message catalog for locale %r at %s", locale, path)
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as exc:
                msg = f"Invalid JSON in message catalog {path}: {exc}"
                raise ConfigurationError(msg) from exc
            if not isinstance(data, dict):
                msg = f"Message catalog {path} must contain a JSON object"
                raise ConfigurationError(msg)
            catalogs[locale] = data
        return cls(catalogs, default_locale)

    @property
    def locales(self) -> tuple[str, ...]:
        """Locales that have a catalog."""
        return tuple(self._catalogs)

    def translator(self, locale: str, namespace: str = "") -> Translator:
        """Return a translator for *namespace* in *locale*."""
        return Translator(
            locale,
            namespace,
            self._catalogs.get(locale),
            self._catalogs.get(self.default_locale),
        )


def get_translations(namespace: str = "") -> Translator:
    """Return a translator bound to the current request's locale.

    Raises ``LookupError`` outside a request, or when the app has no
    message catalogs configured.
    """
    from warbler.i18n.context import current_locale, get_active_router

    router = get_active_router()
    if router is None or router.messages is None:
        msg = "No message catalogs. Set LocaleConfig(messages_dir=...) on the app."
        raise LookupError(msg)
    return router.messages.translator(current_locale(), namespace)
