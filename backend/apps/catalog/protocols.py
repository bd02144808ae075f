from typing import Any, Iterable, List, Optional, Protocol, Tuple

from .commands import ProductCreateCommand, VariantCommand
from .models import Category, Product


class CacheBackendProtocol(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any, timeout: Optional[int] = None) -> None: ...


class CategoryRepositoryProtocol(Protocol):
    def list(self, **filters) -> Iterable[Category]: ...

    def get(self, **filters) -> Optional[Category]: ...

    def find_by_ref(self, ref: str) -> Optional[Category]: ...

    def exists(self, **filters) -> bool: ...

    def create(self, **data) -> Category: ...

    def update(self, obj: Category, **data) -> Category: ...

    def delete(self, obj: Category) -> None: ...


class ProductRepositoryProtocol(Protocol):
    def get(self, **filters) -> Optional[Product]: ...

    def exists(self, **filters) -> bool: ...

    def search(
        self,
        *,
        category: Optional[str],
        search: Optional[str],
        featured: Optional[bool],
        offset: int,
        limit: int,
    ) -> Tuple[List[Product], int]: ...

    def create(self, **data) -> Product: ...

    def update(self, obj: Product, **data) -> Product: ...

    def delete(self, obj: Product) -> None: ...

    def replace_variants(self, product: Product, variants: List[VariantCommand]) -> None: ...

    def replace_items(
        self,
        product: Product,
        items: List[Tuple[ProductCreateCommand, Optional[Category]]],
    ) -> None: ...
