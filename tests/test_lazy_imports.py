"""Tests for warbler.__init__: every public name resolves lazily."""

import pytest

import warbler


@pytest.mark.parametrize("name", warbler.__all__)
def test_all_names_resolve(name: str) -> None:
    obj = getattr(warbler, name)
    assert obj is not None, f"warbler.{name} resolved to None"


def test_locale_names_share_identity() -> None:
    from warbler.i18n.locale import LocaleRouter

    assert warbler.LocaleRouter is LocaleRouter


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        warbler.__getattr__("ThisDoesNotExist")
