"""Variant lookups for catalog products as returned by ``/api/products/``."""
import re
from typing import Any, Dict, Optional

DEFAULT_VARIANT_NAME = "Default"

_WHITESPACE = re.compile(r"\s+")

Product = Dict[str, Any]
Variant = Dict[str, Any]


def variant_slug(name: str) -> str:
    return _WHITESPACE.sub("-", name.lower())


def compose_item_id(product_id: str, variant_name: Optional[str] = None) -> str:
    if not variant_name:
        return product_id
    return f"{product_id}-{variant_slug(variant_name)}"


def default_variant(product: Product) -> Variant:
    variants = product.get("variants") or []
    if variants:
        return variants[0]
    return {"name": DEFAULT_VARIANT_NAME, "image": product.get("image") or "", "price": product["price"]}


def variant_by_name(product: Product, name: str) -> Optional[Variant]:
    for variant in product.get("variants") or []:
        if variant.get("name") == name:
            return variant
    return None


def variant_at(product: Product, index: Optional[int]) -> Variant:
    variants = product.get("variants") or []
    if index is not None and 0 <= index < len(variants):
        return variants[index]
    return default_variant(product)


def display_name(product: Product, variant: Optional[Variant]) -> str:
    if variant is None or variant.get("name") == DEFAULT_VARIANT_NAME:
        return product["name"]
    return f"{product['name']} - {variant['name']}"


def cart_item_for(product: Product, variant: Optional[Variant] = None) -> Dict[str, Any]:
    """Cart line payload (without quantity) for a product and chosen variant."""
    has_variants = bool(product.get("variants"))
    variant = variant or (default_variant(product) if has_variants else None)
    variant_name = variant["name"] if variant and has_variants else None
    item = {
        "id": compose_item_id(product["id"], variant_name),
        "productId": product["id"],
        "name": display_name(product, variant),
        "price": variant["price"] if variant else product["price"],
        "image": (variant or {}).get("image") or product.get("image") or "",
        "category": product.get("category") or "",
        "description": product.get("description") or "",
    }
    if variant_name:
        item["variantName"] = variant_name
    if product.get("items"):
        item["basketItems"] = [dict(sub) for sub in product["items"]]
    return item
