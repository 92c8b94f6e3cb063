import pytest

from screenshot_localizer.products import (
    NoLocalesError,
    ProductNotFoundError,
    load_product,
    resolve_primary_locale,
)


def test_load_product(make_product, products_dir):
    make_product(locales=("ko-KR", "en-US", "ja-JP"), config={"name": "Demo App"})

    product = load_product(products_dir, "demo")

    assert product.name == "Demo App"
    assert product.locales == ["en-US", "ja-JP", "ko-KR"]
    assert product.primary_locale == "en-US"
    assert product.screenshot_bg_color is None


def test_name_falls_back_to_slug(make_product, products_dir):
    make_product()
    assert load_product(products_dir, "demo").name == "demo"


def test_background_color_from_metadata(make_product, products_dir):
    make_product(config={"metadata": {"screenshotBgColor": "#101010"}})
    assert load_product(products_dir, "demo").screenshot_bg_color == "#101010"


def test_missing_product(products_dir):
    with pytest.raises(ProductNotFoundError, match='App not found: "nope"'):
        load_product(products_dir, "nope")


def test_product_without_locales(products_dir):
    (products_dir / "empty").mkdir(parents=True)
    with pytest.raises(NoLocalesError):
        load_product(products_dir, "empty")


def test_invalid_config(make_product, products_dir):
    root = make_product()
    (root / "config.json").write_text("{broken", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid JSON"):
        load_product(products_dir, "demo")


@pytest.mark.parametrize(
    "config,locales,expected",
    [
        ({"defaultLocale": "ko-KR"}, ["en-US", "ko-KR"], "ko-KR"),
        ({"metadata": {"defaultLocale": "ja-JP"}}, ["en-US", "ja-JP"], "ja-JP"),
        ({"defaultLocale": "fr-FR"}, ["en-US", "ko-KR"], "en-US"),
        ({}, ["de-DE", "ko-KR"], "de-DE"),
    ],
)
def test_resolve_primary_locale(config, locales, expected):
    assert resolve_primary_locale(config, locales) == expected
