from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

from django.utils.text import slugify

from apps.common.pagination import parse_page_params

TRUTHY = {"1", "true", "yes", "on"}
FALSY = {"0", "false", "no", "off"}


@dataclass
class ProductListQuery:
    page: int = 1
    limit: int = 12
    category: Optional[str] = None
    search: Optional[str] = None
    featured: Optional[bool] = None

    @property
    def cache_fragment(self) -> str:
        featured = "any" if self.featured is None else str(self.featured).lower()
        return (
            f"{self.category or 'all'}:{(self.search or '').lower()}:"
            f"featured-{featured}:p{self.page}:l{self.limit}"
        )

    @staticmethod
    def from_raw(
        params: Mapping[str, Any], *, default_limit: int = 12
    ) -> Tuple[Optional["ProductListQuery"], Dict[str, str]]:
        errors: Dict[str, str] = {}
        page, limit = parse_page_params(
            params, default_limit=default_limit, errors=errors
        )
        featured = None
        raw_featured = str(params.get("featured") or "").strip().lower()
        if raw_featured in TRUTHY:
            featured = True
        elif raw_featured in FALSY:
            featured = False
        elif raw_featured:
            errors["featured"] = "Must be a boolean."
        if errors:
            return None, errors
        return (
            ProductListQuery(
                page=page,
                limit=limit,
                category=(params.get("category") or "").strip() or None,
                search=(params.get("search") or "").strip() or None,
                featured=featured,
            ),
            {},
        )


@dataclass
class VariantCommand:
    name: str
    image: str
    price: Decimal

    @staticmethod
    def many_from_raw(raw: Optional[List[Mapping[str, Any]]]) -> List["VariantCommand"]:
        return [
            VariantCommand(
                name=str(v["name"]).strip(),
                image=str(v.get("image") or "").strip(),
                price=Decimal(str(v["price"])),
            )
            for v in raw or []
        ]


@dataclass
class ProductCreateCommand:
    id: str
    name: str
    price: Decimal
    description: str = ""
    category: Optional[str] = None
    image: str = ""
    in_stock: bool = True
    is_featured: bool = False
    is_new: bool = False
    is_custom: bool = False
    details: Dict[str, Any] = field(default_factory=dict)
    variants: List[VariantCommand] = field(default_factory=list)
    items: List["ProductCreateCommand"] = field(default_factory=list)

    @property
    def scalar_fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "image": self.image,
            "in_stock": self.in_stock,
            "is_featured": self.is_featured,
            "is_new": self.is_new,
            "is_custom": self.is_custom,
            "details": self.details,
        }

    @staticmethod
    def from_raw(payload: Mapping[str, Any]) -> "ProductCreateCommand":
        data = dict(payload or {})
        name = str(data.get("name", "")).strip()
        return ProductCreateCommand(
            id=str(data.get("id") or slugify(name)).strip(),
            name=name,
            price=Decimal(str(data.get("price", "0"))),
            description=str(data.get("description", "")).strip(),
            category=(str(data["category"]).strip() or None)
            if data.get("category")
            else None,
            image=str(data.get("image", "")).strip(),
            in_stock=bool(data.get("in_stock", True)),
            is_featured=bool(data.get("is_featured", False)),
            is_new=bool(data.get("is_new", False)),
            is_custom=bool(data.get("is_custom", False)),
            details=dict(data.get("details") or {}),
            variants=VariantCommand.many_from_raw(data.get("variants")),
            items=[ProductCreateCommand.from_raw(i) for i in data.get("items") or []],
        )


@dataclass
class ProductUpdateCommand:
    product_id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    category: Optional[str] = None
    category_given: bool = False
    variants: Optional[List[VariantCommand]] = None
    items: Optional[List[ProductCreateCommand]] = None

    SCALARS = (
        "name",
        "price",
        "description",
        "image",
        "in_stock",
        "is_featured",
        "is_new",
        "is_custom",
        "details",
    )

    @staticmethod
    def from_raw(product_id: str, payload: Mapping[str, Any]) -> "ProductUpdateCommand":
        data = dict(payload or {})
        data.pop("id", None)
        fields = {k: data[k] for k in ProductUpdateCommand.SCALARS if k in data}
        if "price" in fields:
            fields["price"] = Decimal(str(fields["price"]))
        return ProductUpdateCommand(
            product_id=product_id,
            fields=fields,
            category=(data.get("category") or None),
            category_given="category" in data,
            variants=VariantCommand.many_from_raw(data["variants"])
            if "variants" in data
            else None,
            items=[ProductCreateCommand.from_raw(i) for i in data["items"] or []]
            if "items" in data
            else None,
        )
