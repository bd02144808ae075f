from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone as dt_timezone
from typing import Any, Dict, Mapping, Optional, Tuple

from django.utils import timezone

from apps.common.pagination import parse_page_params, positive_int

from .models import ActivityType


def parse_boundary(raw: Optional[str], *, end: bool = False) -> Optional[datetime]:
    """Parse an ISO date or datetime; bare dates cover the whole day."""
    if not raw:
        return None
    text = raw.strip().replace("Z", "+00:00")
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        parsed = None
    if parsed is None or (len(text) == 10 and "T" not in text):
        day = date.fromisoformat(text[:10])
        parsed = datetime.combine(day, time.max if end else time.min)
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


@dataclass
class ActivityQueryCommand:
    page: int = 1
    limit: int = 20
    type: Optional[str] = None
    user_id: Optional[int] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_raw(
        params: Mapping[str, Any], *, default_limit: int = 20
    ) -> Tuple[Optional["ActivityQueryCommand"], Dict[str, str]]:
        errors: Dict[str, str] = {}
        page, limit = parse_page_params(
            params, default_limit=default_limit, errors=errors
        )
        activity_type = params.get("type") or None
        if activity_type and activity_type not in ActivityType.values:
            errors["type"] = "Unknown activity type."
        user_id = None
        if params.get("userId"):
            user_id = positive_int(params.get("userId"), "userId", 0, errors) or None
        start = end = None
        try:
            start = parse_boundary(params.get("startDate"))
        except ValueError:
            errors["startDate"] = "Use an ISO 8601 date."
        try:
            end = parse_boundary(params.get("endDate"), end=True)
        except ValueError:
            errors["endDate"] = "Use an ISO 8601 date."
        if start and end and start > end:
            errors["endDate"] = "endDate must not be before startDate."
        metadata = {
            key: str(params[key]) for key in ("orderId", "productId") if params.get(key)
        }
        if errors:
            return None, errors
        return (
            ActivityQueryCommand(
                page=page,
                limit=limit,
                type=activity_type,
                user_id=user_id,
                start=start,
                end=end,
                metadata=metadata,
            ),
            {},
        )


@dataclass
class ActivityRecordCommand:
    type: str
    user_id: Optional[int] = None
    description: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    session_id: str = ""
    ip_address: Optional[str] = None
    user_agent: str = ""
