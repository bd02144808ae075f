from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from apps.common.pagination import PaginationDTO


@dataclass
class CategoryDTO:
    id: int
    name: str
    slug: str
    description: str = ""


@dataclass
class VariantDTO:
    name: str
    image: str
    price: Decimal


@dataclass
class ProductDTO:
    id: str
    name: str
    description: str
    category: Optional[str]
    price: Decimal
    image: str
    in_stock: bool = True
    is_featured: bool = False
    is_new: bool = False
    is_custom: bool = False
    details: Dict[str, Any] = field(default_factory=dict)
    variants: List[VariantDTO] = field(default_factory=list)
    items: List["ProductDTO"] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""


@dataclass
class ProductPageDTO:
    products: List[ProductDTO]
    pagination: PaginationDTO
