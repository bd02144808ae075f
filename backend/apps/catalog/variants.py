"""Variant lookups and cart-line identity for catalog products.

A cart line for a product with variants is identified by
``{productId}-{variantSlug}``; products without variants use their id as is.
"""
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Iterator, Optional, Tuple

from .dtos import ProductDTO, VariantDTO

DEFAULT_VARIANT_NAME = "Default"

_WHITESPACE = re.compile(r"\s+")


def default_variant(product: ProductDTO) -> VariantDTO:
    if product.variants:
        return product.variants[0]
    return VariantDTO(
        name=DEFAULT_VARIANT_NAME, image=product.image or "", price=product.price
    )


def variant_by_name(product: ProductDTO, name: str) -> Optional[VariantDTO]:
    for variant in product.variants:
        if variant.name == name:
            return variant
    return None


def variant_slug(name: str) -> str:
    return _WHITESPACE.sub("-", name.lower())


def compose_item_id(product_id: str, variant_name: Optional[str] = None) -> str:
    if not variant_name:
        return product_id
    return f"{product_id}-{variant_slug(variant_name)}"


def display_name(product: ProductDTO, variant: Optional[VariantDTO]) -> str:
    if variant is None or variant.name == DEFAULT_VARIANT_NAME:
        return product.name
    return f"{product.name} - {variant.name}"


@dataclass
class ResolvedItem:
    product: ProductDTO
    variant: Optional[VariantDTO] = None

    @property
    def price(self) -> Decimal:
        return (self.variant or default_variant(self.product)).price

    @property
    def image(self) -> str:
        return (self.variant or default_variant(self.product)).image

    @property
    def name(self) -> str:
        return display_name(self.product, self.variant)


def _split_candidates(item_id: str) -> Iterator[Tuple[str, str]]:
    # Longest product id first; product ids are themselves hyphenated slugs.
    index = len(item_id)
    while True:
        index = item_id.rfind("-", 0, index)
        if index <= 0:
            return
        yield item_id[:index], item_id[index + 1 :]


def resolve_item_id(
    item_id: str, lookup: Callable[[str], Optional[ProductDTO]]
) -> Optional[ResolvedItem]:
    """Map a cart line id back to its product and, when composed, its variant."""
    if not item_id:
        return None
    product = lookup(item_id)
    if product is not None:
        return ResolvedItem(product=product)
    for product_id, slug in _split_candidates(item_id):
        product = lookup(product_id)
        if product is None:
            continue
        for variant in product.variants:
            if variant_slug(variant.name) == slug:
                return ResolvedItem(product=product, variant=variant)
    return None
