"""Password hashing utilities using bcrypt."""
from __future__ import annotations

import bcrypt


class PasswordValidationError(ValueError):
    """Raised when a password fails the length policy."""


def validate_password_strength(password: str, min_length: int = 6) -> None:
    """Registration passwords only need a minimum length."""
    if len(password or "") < min_length:
        raise PasswordValidationError(f"Password must be at least {min_length} characters long.")


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a stored hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError, AttributeError):
        return False
