from typing import Iterable, List

from .dtos import CategoryDTO, ProductDTO, VariantDTO
from .models import Category, Product, ProductVariant


def _iso(value) -> str:
    return value.isoformat() if value else ""


class CategoryMapper:
    @staticmethod
    def to_dto(cat: Category) -> CategoryDTO:
        return CategoryDTO(
            id=cat.id, name=cat.name, slug=cat.slug, description=cat.description or ""
        )

    @staticmethod
    def many_to_dto(categories: Iterable[Category]) -> List[CategoryDTO]:
        return [CategoryMapper.to_dto(c) for c in categories]


class ProductMapper:
    @staticmethod
    def variant_to_dto(variant: ProductVariant) -> VariantDTO:
        return VariantDTO(name=variant.name, image=variant.image, price=variant.price)

    @classmethod
    def to_dto(cls, product: Product, *, include_items: bool = True) -> ProductDTO:
        category = product.category if product.category_id else None
        items = []
        if include_items:
            items = [cls.to_dto(child, include_items=False) for child in product.items.all()]
        return ProductDTO(
            id=product.id,
            name=product.name,
            description=product.description,
            category=category.name if category else None,
            price=product.price,
            image=product.image,
            in_stock=product.in_stock,
            is_featured=product.is_featured,
            is_new=product.is_new,
            is_custom=product.is_custom,
            details=dict(product.details or {}),
            variants=[cls.variant_to_dto(v) for v in product.variants.all()],
            items=items,
            created_at=_iso(product.created_at),
            updated_at=_iso(product.updated_at),
        )

    @classmethod
    def many_to_dto(cls, products: Iterable[Product]) -> List[ProductDTO]:
        return [cls.to_dto(p) for p in products]
