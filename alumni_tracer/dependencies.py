"""FastAPI dependencies."""
import logging

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from alumni_tracer.database import get_db
from alumni_tracer.models.base import UserStatus
from alumni_tracer.models.user import User
from alumni_tracer.services.activity_log_service import RequestContext
from alumni_tracer.services.auth_service import AuthError, AuthService
from alumni_tracer.services.user_service import UserService

logger = logging.getLogger(__name__)


def _mask_identifier(identifier: str) -> str:
    """Mask a sensitive identifier for logging (e.g., user_id, token)."""
    if not identifier:
        return "<missing>"
    if len(identifier) <= 8:
        return f"{identifier[:2]}...{identifier[-2:]}"
    return f"{identifier[:4]}...{identifier[-4:]}"


async def get_optional_user(
        authorization: str | None = Header(default=None, alias="Authorization"),
        db: AsyncSession = Depends(get_db),
) -> User | None:
    """Resolve the caller from a Bearer access token, or None for anonymous callers.

    Survey endpoints accept anonymous respondents, so malformed, expired or
    unknown tokens degrade to anonymous instead of failing the request.
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        logger.debug("Ignoring non-bearer Authorization header")
        return None

    try:
        user_id = AuthService().user_id_from_token(token)
    except AuthError as exc:
        logger.info(f"Treating caller as anonymous: {exc} (token={_mask_identifier(token)})")
        return None

    user = await UserService(db).get_user_by_id(user_id)
    if user is None or user.status != UserStatus.ACTIVE.value:
        return None
    return user


def get_request_context(request: Request) -> RequestContext:
    """Client address and user agent for audit records."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        ip_address = forwarded_for.split(",")[0].strip()
    else:
        ip_address = request.client.host if request.client else None
    return RequestContext(ip_address=ip_address, user_agent=request.headers.get("user-agent"))
