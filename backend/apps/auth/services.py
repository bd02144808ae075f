from __future__ import annotations

import smtplib
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlencode

from django.template.loader import render_to_string
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from apps.common import get_logger
from apps.common.mail import MailerProtocol
from apps.users.dtos import UserDTO, user_to_dto
from apps.users.models import Role
from .protocols import (
    CredentialsBackendProtocol,
    PasswordResetRepositoryProtocol,
    ResetTokenGeneratorProtocol,
    UserRegistrationRepositoryProtocol,
)

logger = get_logger(__name__).bind(component="auth", layer="service")

ServiceError = Tuple[str, str, Optional[Any]]


class RegistrationService:
    def __init__(self, users: UserRegistrationRepositoryProtocol):
        self.users = users
        self.logger = logger.bind(service="RegistrationService")

    def _check_uniqueness(self, username: str, email: str) -> Optional[ServiceError]:
        if self.users.username_exists(username):
            self.logger.info(
                "Registration rejected: username already exists", username=username
            )
            return (
                "VALIDATION_ERROR",
                "Username already exists",
                {"username": username},
            )
        if self.users.email_exists(email):
            self.logger.info("Registration rejected: email already exists", email=email)
            return ("VALIDATION_ERROR", "Email already exists", {"email": email})
        return None

    def register(
        self, data: Dict[str, Any]
    ) -> Tuple[Optional[UserDTO], Optional[ServiceError]]:
        username = data["username"].strip()
        email = data["email"].strip().lower()
        self.logger.debug("Received registration request", username=username, email=email)
        conflict = self._check_uniqueness(username, email)
        if conflict:
            return None, conflict
        user = self.users.create_user(
            username=username,
            email=email,
            password=data["password"],
            first_name=data.get("first_name", "").strip(),
            last_name=data.get("last_name", "").strip(),
            role=Role.CUSTOMER,
        )
        self.logger.info("User registered", user_id=user.id, username=user.username)
        return user_to_dto(user), None


class SessionService:
    def __init__(self, credentials: CredentialsBackendProtocol):
        self.credentials = credentials
        self.logger = logger.bind(service="SessionService")

    @staticmethod
    def _issue_tokens(user) -> Dict[str, str]:
        refresh = RefreshToken.for_user(user)
        return {"token": str(refresh.access_token), "refreshToken": str(refresh)}

    def login(
        self, email: str, password: str
    ) -> Tuple[Optional[Dict[str, Any]], Optional[ServiceError]]:
        normalized = (email or "").strip().lower()
        user = self.credentials.authenticate(normalized, password)
        if user is None or not getattr(user, "is_active", True):
            self.logger.info("Login rejected", email=normalized)
            return None, (
                "UNAUTHORIZED",
                "Invalid email or password",
                {"email": normalized},
            )
        self.credentials.mark_login(user)
        self.logger.info("User logged in", user_id=user.id, role=user.role)
        return {**self._issue_tokens(user), "user": user_to_dto(user)}, None

    def refresh(
        self, refresh_token: str
    ) -> Tuple[Optional[Dict[str, str]], Optional[ServiceError]]:
        serializer = TokenRefreshSerializer(data={"refresh": refresh_token})
        try:
            serializer.is_valid(raise_exception=True)
        except (TokenError, DRFValidationError) as exc:
            self.logger.info("Token refresh rejected", error=str(exc))
            return None, ("UNAUTHORIZED", "Invalid or expired refresh token", None)
        data = serializer.validated_data
        return {
            "token": data["access"],
            "refreshToken": data.get("refresh", refresh_token),
        }, None

    def logout(
        self, refresh_token: Optional[str], actor_id: Optional[int]
    ) -> Optional[ServiceError]:
        if not refresh_token:
            self.logger.warning("Logout rejected: missing refresh token", actor_id=actor_id)
            return ("VALIDATION_ERROR", "Invalid token", {"refreshToken": None})
        try:
            RefreshToken(refresh_token).blacklist()
        except TokenError as exc:
            self.logger.warning("Logout failed: token error", actor_id=actor_id, error=str(exc))
            return ("VALIDATION_ERROR", "Invalid token", {"error": str(exc)})
        self.logger.info("User logged out", actor_id=actor_id)
        return None


RESET_HTML_TEMPLATE = "auth/password_reset.html"
RESET_TEXT_TEMPLATE = "auth/password_reset.txt"
INVALID_RESET_TOKEN: ServiceError = ("VALIDATION_ERROR", "Invalid or expired reset token", None)


class PasswordResetService:
    """
    Emails single-use reset links and applies new passwords.

    The token handed to the client is ``<base64 user id>.<signed token>``; the
    signed part is invalidated by the password change itself.
    """

    def __init__(
        self,
        users: PasswordResetRepositoryProtocol,
        mailer: MailerProtocol,
        tokens: ResetTokenGeneratorProtocol,
        reset_url: str,
    ):
        self.users = users
        self.mailer = mailer
        self.tokens = tokens
        self.reset_url = reset_url
        self.logger = logger.bind(service="PasswordResetService")

    def _issue_token(self, user) -> str:
        return f"{urlsafe_base64_encode(force_bytes(user.pk))}.{self.tokens.make_token(user)}"

    def _resolve_token(self, token: str):
        encoded_id, _, signed = (token or "").strip().partition(".")
        if not encoded_id or not signed:
            return None
        try:
            user_id = int(force_str(urlsafe_base64_decode(encoded_id)))
        except ValueError:
            return None
        user = self.users.get_by_id(user_id)
        if user is None or not self.tokens.check_token(user, signed):
            return None
        return user

    def request_reset(self, email: str) -> Tuple[Optional[Any], Optional[ServiceError]]:
        """Returns the matched user, or ``None`` when no active account uses ``email``."""
        normalized = (email or "").strip().lower()
        user = self.users.find_active_by_email(normalized)
        if user is None:
            self.logger.info("Password reset requested for unknown email", email=normalized)
            return None, None
        token = self._issue_token(user)
        context = {
            "name": user.first_name or user.username,
            "reset_link": f"{self.reset_url}?{urlencode({'token': token})}",
            "token": token,
        }
        try:
            self.mailer.send(
                subject="Reset your Tassel & Wicker password",
                text=render_to_string(RESET_TEXT_TEMPLATE, context),
                html=render_to_string(RESET_HTML_TEMPLATE, context),
                to=[user.email],
            )
        except (smtplib.SMTPException, OSError) as exc:
            self.logger.error("Password reset email failed", user_id=user.id, error=str(exc))
            return user, ("EMAIL_ERROR", "Failed to send password reset email", None)
        self.logger.info("Password reset email sent", user_id=user.id)
        return user, None

    def reset_password(
        self, token: str, new_password: str
    ) -> Tuple[Optional[Any], Optional[ServiceError]]:
        user = self._resolve_token(token)
        if user is None:
            self.logger.info("Password reset rejected: bad token")
            return None, INVALID_RESET_TOKEN
        self.users.set_password(user, new_password)
        revoked = self.users.revoke_sessions(user)
        self.logger.info("Password reset", user_id=user.id, revoked_sessions=revoked)
        return user, None
