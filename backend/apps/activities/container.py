from __future__ import annotations

from django.conf import settings

from .repositories import ActivityRepository
from .services import ActivityService


def build_activity_service() -> ActivityService:
    return ActivityService(
        activities=ActivityRepository(),
        default_page_size=getattr(settings, "ACTIVITY_PAGE_SIZE", 20),
    )
