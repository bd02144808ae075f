from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Tuple

from django.db import transaction
from django.utils.text import slugify

from apps.common import get_logger
from apps.common.pagination import PaginationDTO
from .commands import ProductCreateCommand, ProductListQuery, ProductUpdateCommand
from .dtos import CategoryDTO, ProductDTO, ProductPageDTO
from .mappers import CategoryMapper, ProductMapper
from .models import Category, Product
from .protocols import (
    CacheBackendProtocol,
    CategoryRepositoryProtocol,
    ProductRepositoryProtocol,
)
from .variants import ResolvedItem, resolve_item_id

logger = get_logger(__name__).bind(component="catalog", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]


class ProductService:
    def __init__(
        self,
        products: ProductRepositoryProtocol,
        categories: CategoryRepositoryProtocol,
        cache_backend: CacheBackendProtocol,
        disable_cache: bool = False,
        default_page_size: int = 12,
    ):
        self.products = products
        self.categories = categories
        self.cache = cache_backend
        self.disable_cache = disable_cache
        self.default_page_size = default_page_size
        self.logger = logger.bind(service="ProductService")
        # Caching keys
        self._cache_prefix = "products:list"
        self._cache_version_key = f"{self._cache_prefix}:version"
        self._default_version = 1

    def _get_cache_version(self) -> int:
        v = self.cache.get(self._cache_version_key)
        return v or self._default_version

    def _bump_cache_version(self) -> None:
        v = self._get_cache_version()
        # Version key should not expire
        self.cache.set(self._cache_version_key, v + 1, timeout=None)
        self.logger.debug("Bumped product cache version", new_version=v + 1)

    def _cache_key(self, query: ProductListQuery) -> str:
        return f"{self._cache_prefix}:v{self._get_cache_version()}:{query.cache_fragment}"

    def _load_page(self, query: ProductListQuery) -> ProductPageDTO:
        rows, total = self.products.search(
            category=query.category,
            search=query.search,
            featured=query.featured,
            offset=(query.page - 1) * query.limit,
            limit=query.limit,
        )
        return ProductPageDTO(
            products=ProductMapper.many_to_dto(rows),
            pagination=PaginationDTO.build(query.page, query.limit, total),
        )

    def list_products(
        self, params: Mapping[str, Any]
    ) -> Tuple[Optional[ProductPageDTO], Optional[ServiceError]]:
        query, errors = ProductListQuery.from_raw(
            params, default_limit=self.default_page_size
        )
        if errors:
            self.logger.info("Rejected product query", errors=errors)
            return None, ("VALIDATION_ERROR", "Invalid product filters", errors)
        self.logger.debug(
            "Listing products",
            category=query.category,
            search=query.search,
            cache_enabled=not self.disable_cache,
        )
        if self.disable_cache:
            return self._load_page(query), None
        # Read-through cache per filter combination
        key = self._cache_key(query)
        cached = self.cache.get(key)
        if cached is not None:
            self.logger.debug("Product list cache hit", cache_key=key)
            return cached, None
        self.logger.debug("Product list cache miss", cache_key=key)
        page = self._load_page(query)
        self.cache.set(key, page)
        return page, None

    def get_product(self, product_id: str) -> Optional[ProductDTO]:
        self.logger.debug("Fetching product", product_id=product_id)
        p = self.products.get(id=product_id)
        if not p:
            self.logger.info("Product not found", product_id=product_id)
        return ProductMapper.to_dto(p) if p else None

    def resolve_item(self, item_id: str) -> Optional[ResolvedItem]:
        """Resolve a cart line id (plain or variant-composed) against the catalog."""
        resolved = resolve_item_id(item_id, self.get_product)
        if resolved is None:
            self.logger.info("Cart item id did not resolve", item_id=item_id)
        return resolved

    def _category_for(
        self, ref: Optional[str]
    ) -> Tuple[Optional[Category], Optional[ServiceError]]:
        if not ref:
            return None, None
        category = self.categories.find_by_ref(ref)
        if category is None:
            return None, (
                "VALIDATION_ERROR",
                "Unknown category",
                {"category": ref},
            )
        return category, None

    def _item_categories(
        self, items: List[ProductCreateCommand], fallback: Optional[Category]
    ) -> Tuple[List[Tuple[ProductCreateCommand, Optional[Category]]], Optional[ServiceError]]:
        pairs = []
        for item in items:
            category, error = self._category_for(item.category)
            if error:
                return [], error
            pairs.append((item, category or fallback))
        return pairs, None

    def create_product(
        self, data: Dict[str, Any] | ProductCreateCommand
    ) -> Tuple[Optional[ProductDTO], Optional[ServiceError]]:
        cmd = (
            data
            if isinstance(data, ProductCreateCommand)
            else ProductCreateCommand.from_raw(data)
        )
        self.logger.info("Creating product", product_id=cmd.id, name=cmd.name)
        if not cmd.id:
            return None, ("VALIDATION_ERROR", "Product id is required", {"id": cmd.id})
        ids = [cmd.id] + [item.id for item in cmd.items]
        if len(set(ids)) != len(ids) or any(
            self.products.exists(id=product_id) for product_id in ids
        ):
            self.logger.warning("Product create rejected: id taken", product_id=cmd.id)
            return None, ("CONFLICT", "Product id already exists", {"id": cmd.id})
        category, error = self._category_for(cmd.category)
        if error:
            return None, error
        items, error = self._item_categories(cmd.items, category)
        if error:
            return None, error
        with transaction.atomic():
            product: Product = self.products.create(
                id=cmd.id, category=category, **cmd.scalar_fields
            )
            self.products.replace_variants(product, cmd.variants)
            if items:
                self.products.replace_items(product, items)
        self._bump_cache_version()
        self.logger.info("Product created", product_id=product.id)
        return self.get_product(product.id), None

    def update_product(
        self, product_id: str, data: Dict[str, Any] | ProductUpdateCommand
    ) -> Tuple[Optional[ProductDTO], Optional[ServiceError]]:
        cmd = (
            data
            if isinstance(data, ProductUpdateCommand)
            else ProductUpdateCommand.from_raw(product_id, data)
        )
        self.logger.info("Updating product", product_id=product_id, fields=sorted(cmd.fields))
        product: Optional[Product] = self.products.get(id=product_id)
        if not product:
            self.logger.warning("Product update failed: not found", product_id=product_id)
            return None, ("PRODUCT_NOT_FOUND", "Product not found", {"id": product_id})
        fields = dict(cmd.fields)
        if cmd.category_given:
            category, error = self._category_for(cmd.category)
            if error:
                return None, error
            fields["category"] = category
        items = None
        if cmd.items is not None:
            items, error = self._item_categories(
                cmd.items, fields.get("category", product.category)
            )
            if error:
                return None, error
        original_fields = {name: getattr(product, name) for name in fields}
        try:
            with transaction.atomic():
                if fields:
                    self.products.update(product, **fields)
                if cmd.variants is not None:
                    self.products.replace_variants(product, cmd.variants)
                if items is not None:
                    self.products.replace_items(product, items)
        except Exception:
            for name, value in original_fields.items():
                setattr(product, name, value)
            raise
        self._bump_cache_version()
        self.logger.info("Product updated", product_id=product_id)
        return self.get_product(product_id), None

    def delete_product(self, product_id: str) -> Tuple[bool, Optional[ServiceError]]:
        self.logger.info("Deleting product", product_id=product_id)
        product = self.products.get(id=product_id)
        if not product:
            self.logger.warning("Product deletion failed: not found", product_id=product_id)
            return False, ("PRODUCT_NOT_FOUND", "Product not found", {"id": product_id})
        self.products.delete(product)
        self._bump_cache_version()
        self.logger.info("Product deleted", product_id=product_id)
        return True, None


class CategoryService:
    def __init__(self, categories: CategoryRepositoryProtocol):
        self.categories = categories
        self.logger = logger.bind(service="CategoryService")

    def list_categories(self) -> List[CategoryDTO]:
        self.logger.debug("Listing categories")
        return CategoryMapper.many_to_dto(self.categories.list())

    def get_category(self, category_id: int) -> Optional[CategoryDTO]:
        self.logger.debug("Fetching category", category_id=category_id)
        c = self.categories.get(id=category_id)
        if not c:
            self.logger.info("Category not found", category_id=category_id)
        return CategoryMapper.to_dto(c) if c else None

    def _slug_conflict(
        self, name: str, slug: str, exclude_id: Optional[int] = None
    ) -> Optional[ServiceError]:
        for field, value in (("name__iexact", name), ("slug", slug)):
            matches = self.categories.list(**{field: value})
            if any(c.id != exclude_id for c in matches):
                return ("CONFLICT", "Category already exists", {"name": name, "slug": slug})
        return None

    def create_category(
        self, data: Dict[str, Any]
    ) -> Tuple[Optional[CategoryDTO], Optional[ServiceError]]:
        name = str(data.get("name", "")).strip()
        slug = str(data.get("slug") or slugify(name))
        self.logger.info("Creating category", name=name, slug=slug)
        conflict = self._slug_conflict(name, slug)
        if conflict:
            self.logger.warning("Category create rejected: duplicate", name=name)
            return None, conflict
        category: Category = self.categories.create(
            name=name, slug=slug, description=data.get("description", "") or ""
        )
        self.logger.info("Category created", category_id=category.id)
        return CategoryMapper.to_dto(category), None

    def update_category(
        self, category_id: int, data: Dict[str, Any]
    ) -> Tuple[Optional[CategoryDTO], Optional[ServiceError]]:
        self.logger.info("Updating category", category_id=category_id)
        category: Optional[Category] = self.categories.get(id=category_id)
        if not category:
            self.logger.warning("Category update failed: not found", category_id=category_id)
            return None, ("NOT_FOUND", "Category not found", {"id": str(category_id)})
        payload = {k: v for k, v in data.items() if k in ("name", "slug", "description")}
        if "name" in payload and "slug" not in payload:
            payload["slug"] = slugify(payload["name"])
        conflict = self._slug_conflict(
            payload.get("name", category.name),
            payload.get("slug", category.slug),
            exclude_id=category.id,
        )
        if conflict:
            return None, conflict
        self.categories.update(category, **payload)
        self.logger.info("Category updated", category_id=category_id)
        return CategoryMapper.to_dto(category), None

    def delete_category(self, category_id: int) -> Tuple[bool, Optional[ServiceError]]:
        self.logger.info("Deleting category", category_id=category_id)
        category = self.categories.get(id=category_id)
        if not category:
            self.logger.warning("Category deletion failed: not found", category_id=category_id)
            return False, ("NOT_FOUND", "Category not found", {"id": str(category_id)})
        # Products keep existing with a null category (SET_NULL).
        self.categories.delete(category)
        self.logger.info("Category deleted", category_id=category_id)
        return True, None
