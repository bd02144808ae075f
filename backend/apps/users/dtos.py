from dataclasses import dataclass
from typing import Optional

from .models import User


@dataclass
class UserDTO:
    id: int
    email: str
    username: str
    first_name: str
    last_name: str
    phone: Optional[str]
    role: str
    is_email_verified: bool
    is_active: bool
    date_joined: Optional[str]
    last_login: Optional[str]


def _iso(value) -> Optional[str]:
    if value is None:
        return None
    try:
        return value.isoformat()
    except AttributeError:
        return str(value)


def user_to_dto(u: User) -> UserDTO:
    return UserDTO(
        id=u.id,
        email=u.email,
        username=u.username,
        first_name=u.first_name,
        last_name=u.last_name,
        phone=u.phone,
        role=u.role,
        is_email_verified=bool(u.is_email_verified),
        is_active=bool(getattr(u, "is_active", True)),
        date_joined=_iso(getattr(u, "date_joined", None)),
        last_login=_iso(getattr(u, "last_login", None)),
    )
