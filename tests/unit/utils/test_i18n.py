from __future__ import annotations

"""
Unit tests for the i18n service.

Verifies:
1. Dot-notation lookup and interpolation against the bundled catalogue.
2. Fallbacks for missing keys and locales.
"""

from taxabars.utils.i18n import I18n, i18n


def test_singleton_is_loaded() -> None:
    assert i18n.is_loaded
    assert i18n.locale == "en"


def test_interpolation() -> None:
    text = i18n.t("projection.rejections.no_descendants_at_depth", taxon="a;x", depth=4)
    assert "a;x" in text and "4" in text


def test_missing_key_falls_back() -> None:
    assert i18n.t("does.not.exist") == "does.not.exist"
    assert i18n.t("does.not.exist", default="Fallback {n}", n=1) == "Fallback 1"


def test_missing_placeholder_returns_template() -> None:
    text = i18n.t("cli.errors.path_not_exist")
    assert "{path}" in text
    assert i18n.t("cli.errors.path_not_exist", other="x") == text


def test_unknown_locale() -> None:
    service = I18n("xx")
    assert not service.is_loaded
    assert service.t("app.description") == "app.description"
