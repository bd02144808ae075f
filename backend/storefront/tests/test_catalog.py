from storefront import catalog

PRODUCT = {
    "id": "classic-hamper",
    "name": "Classic Hamper",
    "price": 80,
    "category": "Hampers",
    "image": "hamper.jpg",
    "variants": [
        {"name": "Default", "image": "hamper.jpg", "price": 80},
        {"name": "Deluxe  Edition", "image": "deluxe.jpg", "price": 120},
    ],
    "items": [{"name": "Shortbread", "quantity": 1}],
}


def test_variant_slug_collapses_whitespace():
    assert catalog.variant_slug("Deluxe  Edition") == "deluxe-edition"
    assert catalog.compose_item_id("classic-hamper", "Deluxe  Edition") == "classic-hamper-deluxe-edition"
    assert catalog.compose_item_id("classic-hamper") == "classic-hamper"


def test_default_variant_falls_back_to_product():
    plain = {"id": "tea", "name": "Tea", "price": 6, "image": "tea.jpg"}
    assert catalog.default_variant(plain) == {"name": "Default", "image": "tea.jpg", "price": 6}
    assert catalog.default_variant(PRODUCT)["price"] == 80


def test_cart_item_for_variant():
    item = catalog.cart_item_for(PRODUCT, catalog.variant_by_name(PRODUCT, "Deluxe  Edition"))
    assert item["id"] == "classic-hamper-deluxe-edition"
    assert item["name"] == "Classic Hamper - Deluxe  Edition"
    assert item["price"] == 120
    assert item["variantName"] == "Deluxe  Edition"
    assert item["basketItems"] == [{"name": "Shortbread", "quantity": 1}]


def test_cart_item_for_product_without_variants():
    item = catalog.cart_item_for({"id": "tea", "name": "Tea", "price": 6})
    assert item["id"] == "tea"
    assert "variantName" not in item
