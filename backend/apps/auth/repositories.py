from __future__ import annotations

from typing import Any, Optional

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.models import update_last_login
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken


class DjangoUserRegistrationRepository:
    def __init__(self) -> None:
        self.model = get_user_model()

    def username_exists(self, username: str) -> bool:
        return self.model.objects.filter(username__iexact=username).exists()

    def email_exists(self, email: str) -> bool:
        return self.model.objects.filter(email__iexact=email).exists()

    def create_user(self, **data: Any):
        return self.model.objects.create_user(**data)


class DjangoCredentialsBackend:
    """Checks email/password pairs through the configured auth backends."""

    def authenticate(self, email: str, password: str) -> Optional[Any]:
        return authenticate(username=email, password=password)

    def mark_login(self, user: Any) -> None:
        update_last_login(None, user)


class DjangoPasswordResetRepository:
    def __init__(self) -> None:
        self.model = get_user_model()

    def find_active_by_email(self, email: str) -> Optional[Any]:
        return self.model.objects.filter(email__iexact=email, is_active=True).first()

    def get_by_id(self, user_id: int) -> Optional[Any]:
        return self.model.objects.filter(pk=user_id, is_active=True).first()

    def set_password(self, user: Any, password: str) -> None:
        user.set_password(password)
        user.save(update_fields=["password"])

    def revoke_sessions(self, user: Any) -> int:
        """Blacklist every outstanding refresh token issued to ``user``."""
        revoked = 0
        for token in OutstandingToken.objects.filter(user=user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            revoked += int(created)
        return revoked
