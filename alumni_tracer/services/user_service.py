"""Account management."""
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_tracer.config import get_settings
from alumni_tracer.models.base import UserRole, UserStatus
from alumni_tracer.models.user import User
from alumni_tracer.utils.exceptions import EmailAlreadyExists
from alumni_tracer.utils.passwords import hash_password, validate_password_strength

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def get_user_by_id(self, user_id: UUID) -> User | None:
        return await self.db.get(User, user_id)

    async def get_user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(
            select(User).where(User.email == normalize_email(email))
        )
        return result.scalar_one_or_none()

    async def create_user(self, email: str, password: str, role: UserRole | None = None) -> User:
        """Add a new active account to the session and flush it.

        Raises:
            PasswordValidationError: Password is shorter than the configured minimum.
            EmailAlreadyExists: Another account already uses the email.
        """
        email = normalize_email(email)
        validate_password_strength(password, self.settings.min_password_length)

        if await self.get_user_by_email(email):
            raise EmailAlreadyExists("Email already registered")

        if role is None:
            role = UserRole.ADMIN if self.settings.is_admin_email(email) else UserRole.ALUMNI

        user = User(
            email=email,
            password_hash=hash_password(password),
            role=role.value,
            status=UserStatus.ACTIVE.value,
        )
        self.db.add(user)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            raise EmailAlreadyExists("Email already registered") from exc

        logger.info(f"Created {user.role} account {user.user_id}")
        return user
