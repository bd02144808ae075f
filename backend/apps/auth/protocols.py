from __future__ import annotations

from typing import Any, Optional, Protocol


class UserRegistrationRepositoryProtocol(Protocol):
    def username_exists(self, username: str) -> bool: ...

    def email_exists(self, email: str) -> bool: ...

    def create_user(self, **data: Any) -> Any: ...


class CredentialsBackendProtocol(Protocol):
    def authenticate(self, email: str, password: str) -> Optional[Any]: ...

    def mark_login(self, user: Any) -> None: ...


class PasswordResetRepositoryProtocol(Protocol):
    def find_active_by_email(self, email: str) -> Optional[Any]: ...

    def get_by_id(self, user_id: int) -> Optional[Any]: ...

    def set_password(self, user: Any, password: str) -> None: ...

    def revoke_sessions(self, user: Any) -> int: ...


class ResetTokenGeneratorProtocol(Protocol):
    def make_token(self, user: Any) -> str: ...

    def check_token(self, user: Any, token: str) -> bool: ...
