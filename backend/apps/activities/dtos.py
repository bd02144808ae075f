from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from apps.common.pagination import PaginationDTO


@dataclass
class ActivityUserDTO:
    id: int
    email: str
    first_name: Optional[str]
    last_name: Optional[str]
    full_name: Optional[str]
    role: str


@dataclass
class ActivityDTO:
    id: int
    type: str
    description: str
    user_id: Optional[int]
    user: Optional[ActivityUserDTO]
    session_id: str
    ip_address: Optional[str]
    user_agent: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: str = ""


@dataclass
class ActivityPageDTO:
    activities: List[ActivityDTO]
    pagination: PaginationDTO


@dataclass
class ActivityStatsDTO:
    activity_counts: List[Dict[str, Any]]
    total_unique_users: int
    recent_activities_count: int
    date_range: Optional[Dict[str, str]] = None
