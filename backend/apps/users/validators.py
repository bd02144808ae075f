import re

from rest_framework import serializers

_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


def validate_username(value: str) -> str:
    """Usernames are 3 to 30 characters of letters, digits, dots, dashes or underscores."""
    if value is None:
        raise serializers.ValidationError("Username is required.")
    trimmed = value.strip()
    if not 3 <= len(trimmed) <= 30:
        raise serializers.ValidationError(
            "Username must be between 3 and 30 characters long."
        )
    if not _USERNAME_PATTERN.match(trimmed):
        raise serializers.ValidationError(
            "Username may contain only letters, numbers, dots, dashes and underscores."
        )
    return trimmed


PASSWORD_RULES = (
    (str.isupper, "Password must include at least one uppercase letter."),
    (str.islower, "Password must include at least one lowercase letter."),
    (str.isdigit, "Password must include at least one number."),
)


def validate_password(value: str) -> str:
    """
    Passwords need at least 8 characters with an uppercase letter, a lowercase
    letter and a digit. Symbols are allowed but not required.
    """
    if value is None:
        raise serializers.ValidationError("Password is required.")
    if len(value) < 8:
        raise serializers.ValidationError(
            "Password must be at least 8 characters long."
        )
    for predicate, message in PASSWORD_RULES:
        if not any(predicate(ch) for ch in value):
            raise serializers.ValidationError(message)
    if any(ch.isspace() for ch in value):
        raise serializers.ValidationError("Password must not contain whitespace.")
    return value
