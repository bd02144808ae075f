from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Q

from apps.common import get_logger
from .dtos import UserDTO, user_to_dto
from .models import Role, User
from .protocols import UserRepositoryProtocol

logger = get_logger(__name__).bind(component="users", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]

EDITABLE_FIELDS = ("first_name", "last_name", "phone", "role", "is_email_verified")


class UserService:
    def __init__(self, users: UserRepositoryProtocol):
        self.users = users
        self.logger = logger.bind(service="UserService")

    def list_users(
        self, *, role: Optional[str] = None, search: Optional[str] = None
    ) -> List[UserDTO]:
        self.logger.debug("Listing users", role=role, search=search)
        filters: Dict[str, Any] = {}
        if role:
            filters["role"] = role
        qs = self.users.list(**filters)
        if search:
            term = search.strip()
            qs = qs.filter(
                Q(email__icontains=term)
                | Q(first_name__icontains=term)
                | Q(last_name__icontains=term)
                | Q(username__icontains=term)
            )
        return [user_to_dto(u) for u in qs]

    def get_user(self, user_id: int) -> Optional[UserDTO]:
        self.logger.debug("Fetching user", user_id=user_id)
        u = self.users.get(id=user_id)
        if not u:
            self.logger.info("User not found", user_id=user_id)
        return user_to_dto(u) if u else None

    def update_user(
        self, user_id: int, data: Dict[str, Any]
    ) -> Tuple[Optional[UserDTO], Optional[ServiceError]]:
        changes = {k: v for k, v in data.items() if k in EDITABLE_FIELDS}
        self.logger.info("Updating user", user_id=user_id, fields=sorted(changes))
        user: Optional[User] = self.users.get(id=user_id)
        if not user:
            self.logger.warning("User update failed: not found", user_id=user_id)
            return None, ("NOT_FOUND", "User not found", {"id": str(user_id)})
        role = changes.get("role")
        if role is not None and role not in Role.values:
            return None, (
                "VALIDATION_ERROR",
                "Invalid role",
                {"role": role, "allowed": list(Role.values)},
            )
        original_fields = {field: getattr(user, field) for field in changes}
        try:
            with transaction.atomic():
                user = self.users.update(user, **changes)
        except Exception:
            for field, value in original_fields.items():
                setattr(user, field, value)
            raise
        self.logger.info("User updated", user_id=user_id, role=user.role)
        return user_to_dto(user), None

    def delete_user(
        self, user_id: int, *, actor_id: Optional[int]
    ) -> Tuple[bool, Optional[ServiceError]]:
        self.logger.info("Deleting user", user_id=user_id, actor_id=actor_id)
        if actor_id is not None and int(actor_id) == int(user_id):
            self.logger.warning("Self deletion rejected", user_id=user_id)
            return False, (
                "FORBIDDEN",
                "You cannot delete your own account",
                {"id": str(user_id)},
            )
        user = self.users.get(id=user_id)
        if not user:
            self.logger.warning("User deletion failed: not found", user_id=user_id)
            return False, ("NOT_FOUND", "User not found", {"id": str(user_id)})
        self.users.delete(user)
        self.logger.info("User deleted", user_id=user_id)
        return True, None
