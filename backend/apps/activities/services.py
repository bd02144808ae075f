from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from django.db import DatabaseError
from django.utils import timezone

from apps.api.utils import client_ip
from apps.common import get_logger
from apps.common.pagination import PaginationDTO
from .commands import ActivityQueryCommand, ActivityRecordCommand, parse_boundary
from .dtos import ActivityDTO, ActivityPageDTO, ActivityStatsDTO
from .mappers import ActivityMapper
from .models import ActivityType
from .protocols import ActivityRepositoryProtocol

logger = get_logger(__name__).bind(component="activities", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]

RECENT_WINDOW = timedelta(hours=24)


class ActivityService:
    def __init__(
        self,
        activities: ActivityRepositoryProtocol,
        *,
        default_page_size: int = 20,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.activities = activities
        self.default_page_size = default_page_size
        self.clock = clock
        self.logger = logger.bind(service="ActivityService")

    def record(self, cmd: ActivityRecordCommand) -> Optional[ActivityDTO]:
        """Persist an audit entry. Failures are logged and never propagate."""
        if cmd.type not in ActivityType.values:
            self.logger.warning("Skipping unknown activity type", type=cmd.type)
            return None
        try:
            activity = self.activities.create(
                type=cmd.type,
                user_id=cmd.user_id,
                description=cmd.description[:255],
                metadata=cmd.metadata,
                session_id=cmd.session_id,
                ip_address=cmd.ip_address,
                user_agent=cmd.user_agent,
            )
        except DatabaseError:
            self.logger.exception(
                "Failed to record activity", type=cmd.type, user_id=cmd.user_id
            )
            return None
        self.logger.debug("Activity recorded", type=cmd.type, user_id=cmd.user_id)
        return ActivityMapper.to_dto(activity)

    def record_from_request(
        self,
        request,
        activity_type: str,
        *,
        description: str = "",
        metadata: Optional[Dict[str, Any]] = None,
        user_id: Optional[int] = None,
    ) -> Optional[ActivityDTO]:
        user = getattr(request, "user", None)
        if user_id is None and getattr(user, "is_authenticated", False):
            user_id = user.id
        headers = getattr(request, "headers", {}) or {}
        return self.record(
            ActivityRecordCommand(
                type=activity_type,
                user_id=user_id,
                description=description,
                metadata=metadata or {},
                session_id=headers.get("X-Session-ID", "") or "",
                ip_address=client_ip(request),
                user_agent=headers.get("User-Agent", "") or "",
            )
        )

    def list_activities(
        self, params: Mapping[str, Any]
    ) -> Tuple[Optional[ActivityPageDTO], Optional[ServiceError]]:
        cmd, errors = ActivityQueryCommand.from_raw(
            params, default_limit=self.default_page_size
        )
        if errors:
            self.logger.info("Rejected activity query", errors=errors)
            return None, ("VALIDATION_ERROR", "Invalid activity filters", errors)
        filters: Dict[str, Any] = {"start": cmd.start, "end": cmd.end}
        if cmd.type:
            filters["type"] = cmd.type
        if cmd.user_id:
            filters["user_id"] = cmd.user_id
        for key, value in cmd.metadata.items():
            filters[f"metadata__{key}"] = value
        offset = (cmd.page - 1) * cmd.limit
        rows, total = self.activities.page(filters, offset=offset, limit=cmd.limit)
        self.logger.debug(
            "Listing activities", page=cmd.page, limit=cmd.limit, total=total
        )
        return (
            ActivityPageDTO(
                activities=ActivityMapper.many_to_dto(rows),
                pagination=PaginationDTO.build(cmd.page, cmd.limit, total),
            ),
            None,
        )

    def stats(
        self, params: Mapping[str, Any]
    ) -> Tuple[Optional[ActivityStatsDTO], Optional[ServiceError]]:
        try:
            start = parse_boundary(params.get("startDate"))
            end = parse_boundary(params.get("endDate"), end=True)
        except ValueError:
            return None, (
                "VALIDATION_ERROR",
                "Invalid date range",
                {"startDate": params.get("startDate"), "endDate": params.get("endDate")},
            )
        now = self.clock()
        date_range = None
        if start or end:
            date_range = {
                "startDate": start.isoformat() if start else "",
                "endDate": end.isoformat() if end else now.isoformat(),
            }
        return (
            ActivityStatsDTO(
                activity_counts=self.activities.counts_by_type(start, end),
                total_unique_users=self.activities.unique_users(start, end),
                recent_activities_count=self.activities.count_since(now - RECENT_WINDOW),
                date_range=date_range,
            ),
            None,
        )
