from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from .models import Activity


class ActivityRepositoryProtocol(Protocol):
    def create(self, **data) -> Activity: ...

    def page(
        self, filters: Dict[str, Any], *, offset: int, limit: int
    ) -> Tuple[Iterable[Activity], int]: ...

    def counts_by_type(
        self, start: Optional[datetime], end: Optional[datetime]
    ) -> List[Dict[str, Any]]: ...

    def unique_users(self, start: Optional[datetime], end: Optional[datetime]) -> int: ...

    def count_since(self, since: datetime) -> int: ...
