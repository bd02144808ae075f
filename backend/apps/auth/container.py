from __future__ import annotations

from django.conf import settings
from django.contrib.auth.tokens import default_token_generator

from apps.common.mail import DjangoMailer
from .repositories import (
    DjangoCredentialsBackend,
    DjangoPasswordResetRepository,
    DjangoUserRegistrationRepository,
)
from .services import PasswordResetService, RegistrationService, SessionService


def build_registration_service() -> RegistrationService:
    return RegistrationService(users=DjangoUserRegistrationRepository())


def build_session_service() -> SessionService:
    return SessionService(credentials=DjangoCredentialsBackend())


def build_password_reset_service() -> PasswordResetService:
    return PasswordResetService(
        users=DjangoPasswordResetRepository(),
        mailer=DjangoMailer(),
        tokens=default_token_generator,
        reset_url=getattr(settings, "PASSWORD_RESET_URL", ""),
    )
