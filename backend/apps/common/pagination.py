import math
from dataclasses import dataclass
from typing import Any, Dict, Tuple

MAX_PAGE_SIZE = 100


@dataclass
class PaginationDTO:
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "PaginationDTO":
        return cls(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        )


def parse_page_params(
    params, *, default_limit: int, errors: Dict[str, str]
) -> Tuple[int, int]:
    """Read ``page``/``limit`` query values, recording problems in ``errors``."""
    page = positive_int(params.get("page"), "page", 1, errors)
    limit = positive_int(params.get("limit"), "limit", default_limit, errors)
    return page, min(limit, MAX_PAGE_SIZE)


def positive_int(raw: Any, name: str, default: int, errors: Dict[str, str]) -> int:
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        errors[name] = "Must be an integer."
        return default
    if value < 1:
        errors[name] = "Must be greater than zero."
        return default
    return value
