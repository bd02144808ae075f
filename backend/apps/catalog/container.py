from __future__ import annotations

from django.conf import settings
from django.core.cache import cache

from .repositories import CategoryRepository, ProductRepository
from .services import CategoryService, ProductService


def build_product_service(*, disable_cache: bool = False) -> ProductService:
    return ProductService(
        products=ProductRepository(),
        categories=CategoryRepository(),
        cache_backend=cache,
        disable_cache=disable_cache,
        default_page_size=getattr(settings, "PRODUCT_PAGE_SIZE", 12),
    )


def build_category_service() -> CategoryService:
    return CategoryService(categories=CategoryRepository())
