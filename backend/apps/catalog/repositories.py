from typing import List, Optional, Tuple

from django.db.models import Q

from apps.common.repository import GenericRepository
from .commands import ProductCreateCommand, VariantCommand
from .models import Category, Product, ProductVariant


class CategoryRepository(GenericRepository[Category]):
    ordering = ("name",)

    def __init__(self):
        super().__init__(Category)

    def find_by_ref(self, ref: str) -> Optional[Category]:
        """Look a category up by slug, falling back to a case-insensitive name."""
        return self.model.objects.filter(Q(slug=ref) | Q(name__iexact=ref)).first()


class ProductRepository(GenericRepository[Product]):
    ordering = ("name", "id")

    def __init__(self):
        super().__init__(Product)

    def _base_queryset(self):
        return (
            super()
            ._base_queryset()
            .select_related("category")
            .prefetch_related("variants", "items__variants", "items__category")
        )

    def search(self, *, category, search, featured, offset: int, limit: int):
        qs = self._base_queryset().filter(parent__isnull=True)
        if category:
            qs = qs.filter(Q(category__slug=category) | Q(category__name__iexact=category))
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(description__icontains=search))
        if featured is not None:
            qs = qs.filter(is_featured=featured)
        total = qs.count()
        return list(qs[offset : offset + limit]), total

    def replace_variants(self, product: Product, variants: List[VariantCommand]) -> None:
        product.variants.all().delete()
        ProductVariant.objects.bulk_create(
            [
                ProductVariant(
                    product=product,
                    name=v.name,
                    image=v.image,
                    price=v.price,
                    position=position,
                )
                for position, v in enumerate(variants)
            ]
        )

    def replace_items(
        self,
        product: Product,
        items: List[Tuple[ProductCreateCommand, Optional[Category]]],
    ) -> None:
        product.items.all().delete()
        for item, category in items:
            child = self.model.objects.create(
                id=item.id,
                parent=product,
                category=category,
                **item.scalar_fields,
            )
            self.replace_variants(child, item.variants)
