from rest_framework.permissions import SAFE_METHODS, BasePermission

from apps.users.models import Role


def user_role(user) -> str:
    if not getattr(user, "is_authenticated", False):
        return ""
    if getattr(user, "is_superuser", False):
        return Role.ADMIN
    return getattr(user, "role", Role.CUSTOMER) or Role.CUSTOMER


class IsAdminRole(BasePermission):
    """Only accounts with the ``admin`` role (or superusers)."""

    message = "Admin role required"

    def has_permission(self, request, view) -> bool:
        return user_role(request.user) == Role.ADMIN


class IsStaffRole(BasePermission):
    """Back-office accounts: ``admin`` or ``moderator``."""

    message = "Admin or moderator role required"

    def has_permission(self, request, view) -> bool:
        return user_role(request.user) in (Role.ADMIN, Role.MODERATOR)


class CatalogWritePermission(BasePermission):
    """Anyone may read; moderators create and update; deleting needs an admin."""

    message = "You do not have permission to modify products"

    def has_permission(self, request, view) -> bool:
        if request.method in SAFE_METHODS:
            return True
        role = user_role(request.user)
        if request.method == "DELETE":
            return role == Role.ADMIN
        return role in (Role.ADMIN, Role.MODERATOR)


class StaffWriteOrReadOnly(BasePermission):
    """Public reads, back-office writes."""

    message = "Admin or moderator role required"

    def has_permission(self, request, view) -> bool:
        if request.method in SAFE_METHODS:
            return True
        return user_role(request.user) in (Role.ADMIN, Role.MODERATOR)
