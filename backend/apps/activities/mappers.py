from typing import Iterable, List, Optional

from .dtos import ActivityDTO, ActivityUserDTO
from .models import Activity


class ActivityMapper:
    @staticmethod
    def user_to_dto(user) -> Optional[ActivityUserDTO]:
        if user is None:
            return None
        first = getattr(user, "first_name", None) or None
        last = getattr(user, "last_name", None) or None
        full = " ".join(part for part in (first, last) if part) or None
        return ActivityUserDTO(
            id=user.id,
            email=user.email,
            first_name=first,
            last_name=last,
            full_name=full,
            role=getattr(user, "role", "customer"),
        )

    @classmethod
    def to_dto(cls, activity: Activity) -> ActivityDTO:
        created = activity.created_at
        return ActivityDTO(
            id=activity.id,
            type=activity.type,
            description=activity.description,
            user_id=activity.user_id,
            user=cls.user_to_dto(activity.user) if activity.user_id else None,
            session_id=activity.session_id,
            ip_address=activity.ip_address,
            user_agent=activity.user_agent,
            metadata=dict(activity.metadata or {}),
            created_at=created.isoformat() if created else "",
        )

    @classmethod
    def many_to_dto(cls, activities: Iterable[Activity]) -> List[ActivityDTO]:
        return [cls.to_dto(a) for a in activities]
