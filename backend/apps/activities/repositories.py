from datetime import datetime
from typing import Any, Dict, Optional

from django.db.models import Count

from apps.common.repository import GenericRepository
from .models import Activity


def _window(qs, start: Optional[datetime], end: Optional[datetime]):
    if start:
        qs = qs.filter(created_at__gte=start)
    if end:
        qs = qs.filter(created_at__lte=end)
    return qs


class ActivityRepository(GenericRepository[Activity]):
    ordering = ("-created_at", "-id")

    def __init__(self):
        super().__init__(Activity)

    def page(self, filters: Dict[str, Any], *, offset: int, limit: int):
        filters = dict(filters)
        start = filters.pop("start", None)
        end = filters.pop("end", None)
        qs = _window(self._base_queryset().select_related("user"), start, end)
        qs = qs.filter(**filters)
        total = qs.count()
        return list(qs[offset : offset + limit]), total

    def counts_by_type(self, start, end):
        qs = _window(self.model.objects.all(), start, end)
        rows = qs.values("type").annotate(count=Count("id")).order_by("-count", "type")
        return [{"type": row["type"], "count": row["count"]} for row in rows]

    def unique_users(self, start, end) -> int:
        qs = _window(self.model.objects.exclude(user__isnull=True), start, end)
        return qs.values("user_id").distinct().count()

    def count_since(self, since: datetime) -> int:
        return self.model.objects.filter(created_at__gte=since).count()
