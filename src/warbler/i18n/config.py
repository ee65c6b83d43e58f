"""Locale configuration.

``LocaleConfig`` is fixed for the lifetime of an app: the supported set,
the default locale and the prefix policy are not runtime-mutable.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from warbler.errors import ConfigurationError


class PrefixPolicy(StrEnum):
    """Whether generated paths carry the default locale's prefix."""

    ALWAYS = "always-prefix"
    OMIT_DEFAULT = "omit-default-prefix"


@dataclass(frozen=True, slots=True)
class LocaleConfig:
    """Locale routing configuration. Immutable after creation.

    Usage::

        LocaleConfig(locales=("en", "tr"), default_locale="en")

    Attributes:
        locales: Supported locale identifiers, matched exactly.
        default_locale: Fallback for unrecognized or absent locales.
        prefix_policy: ``OMIT_DEFAULT`` serves the default locale without
            a path prefix (``/forum``) and every other locale with one
            (``/tr/forum``). ``ALWAYS`` prefixes every locale.
        detect: Detect the locale of unprefixed requests from the locale
            cookie, then ``Accept-Language``, and redirect to it.
        cookie_name: Cookie remembering the visitor's locale (``detect`` only).
        cookie_max_age: Lifetime of that cookie in seconds.
        exclude_paths: Path prefixes that bypass locale prefixes and
            redirects (APIs, static files). They still get the default
            locale as request locale.
        messages_dir: Directory of ``{locale}.json`` message catalogs.
        param_name: Route parameter / form field carrying an explicit locale.
    """

    locales: tuple[str, ...] = ("en",)
    default_locale: str = "en"
    prefix_policy: PrefixPolicy = PrefixPolicy.OMIT_DEFAULT
    detect: bool = False
    cookie_name: str = "locale"
    cookie_max_age: int = 365 * 24 * 60 * 60
    exclude_paths: tuple[str, ...] = ("/api", "/static")
    messages_dir: str | Path | None = None
    param_name: str = "locale"

    def __post_init__(self) -> None:
        object.__setattr__(self, "locales", tuple(self.locales))
        object.__setattr__(self, "exclude_paths", tuple(self.exclude_paths))
        try:
            object.__setattr__(self, "prefix_policy", PrefixPolicy(self.prefix_policy))
        except ValueError:
            msg = (
                f"Unknown prefix policy {self.prefix_policy!r}. "
                f"Use one of: {', '.join(p.value for p in PrefixPolicy)}"
            )
            raise ConfigurationError(msg) from None

        if not self.locales:
            msg = "LocaleConfig requires at least one supported locale."
            raise ConfigurationError(msg)
        if len(set(self.locales)) != len(self.locales):
            msg = f"Duplicate locales in {self.locales!r}"
            raise ConfigurationError(msg)
        for locale in self.locales:
            if not locale or "/" in locale or locale != locale.strip():
                msg = f"Invalid locale identifier {locale!r}"
                raise ConfigurationError(msg)
        if self.default_locale not in self.locales:
            msg = (
                f"Default locale {self.default_locale!r} is not one of the "
                f"supported locales {self.locales!r}"
            )
            raise ConfigurationError(msg)

    def is_supported(self, value: object) -> bool:
        """True if *value* is exactly one of the supported locales."""
        return isinstance(value, str) and value in self.locales

    def omits_prefix(self, locale: str) -> bool:
        """True if paths for *locale* are generated without a prefix."""
        return self.prefix_policy is PrefixPolicy.OMIT_DEFAULT and locale == self.default_locale
