import unittest
from decimal import Decimal

from apps.catalog.dtos import ProductDTO, VariantDTO
from apps.catalog.variants import (
    compose_item_id,
    default_variant,
    display_name,
    resolve_item_id,
    variant_by_name,
    variant_slug,
)


def make_product(product_id="rose-candle", variants=None, price="30.00"):
    return ProductDTO(
        id=product_id,
        name="Rose Candle",
        description="",
        category="Candles",
        price=Decimal(price),
        image="rose.jpg",
        variants=list(variants or []),
    )


LARGE = VariantDTO(name="Large  Red", image="large.jpg", price=Decimal("45.00"))
SMALL = VariantDTO(name="Small", image="small.jpg", price=Decimal("25.00"))


class VariantHelperTests(unittest.TestCase):
    def test_default_variant_is_first_variant(self):
        self.assertEqual(default_variant(make_product(variants=[SMALL, LARGE])), SMALL)

    def test_default_variant_falls_back_to_product_fields(self):
        variant = default_variant(make_product())
        self.assertEqual(variant.name, "Default")
        self.assertEqual(variant.price, Decimal("30.00"))
        self.assertEqual(variant.image, "rose.jpg")

    def test_variant_by_name(self):
        product = make_product(variants=[SMALL, LARGE])
        self.assertIs(variant_by_name(product, "Small"), SMALL)
        self.assertIsNone(variant_by_name(product, "small"))

    def test_slug_collapses_whitespace_runs(self):
        self.assertEqual(variant_slug("Large  Red"), "large-red")
        self.assertEqual(compose_item_id("rose-candle", "Large  Red"), "rose-candle-large-red")
        self.assertEqual(compose_item_id("rose-candle"), "rose-candle")

    def test_display_name_hides_default_variant(self):
        product = make_product()
        self.assertEqual(display_name(product, default_variant(product)), "Rose Candle")
        self.assertEqual(display_name(product, SMALL), "Rose Candle - Small")


class ResolveItemIdTests(unittest.TestCase):
    def setUp(self):
        self.catalog = {
            "rose-candle": make_product(variants=[SMALL, LARGE]),
            "tea": make_product("tea", price="12.50"),
        }

    def test_exact_id_wins(self):
        resolved = resolve_item_id("tea", self.catalog.get)
        self.assertEqual(resolved.product.id, "tea")
        self.assertIsNone(resolved.variant)
        self.assertEqual(resolved.price, Decimal("12.50"))

    def test_composed_id_resolves_hyphenated_product_and_variant(self):
        resolved = resolve_item_id("rose-candle-large-red", self.catalog.get)
        self.assertEqual(resolved.product.id, "rose-candle")
        self.assertEqual(resolved.variant, LARGE)
        self.assertEqual(resolved.price, Decimal("45.00"))
        self.assertEqual(resolved.name, "Rose Candle - Large  Red")

    def test_plain_id_of_variant_product_uses_default_variant_price(self):
        resolved = resolve_item_id("rose-candle", self.catalog.get)
        self.assertEqual(resolved.price, Decimal("25.00"))

    def test_unknown_ids(self):
        self.assertIsNone(resolve_item_id("rose-candle-huge", self.catalog.get))
        self.assertIsNone(resolve_item_id("missing", self.catalog.get))
        self.assertIsNone(resolve_item_id("", self.catalog.get))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
