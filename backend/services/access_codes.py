import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from core.errors import AuthenticationError, classify_storage_error
from db.database import AccessCode as AccessCodeModel

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"


@dataclass(frozen=True)
class AccessGrant:
    code: str
    branch_id: int
    user_name: str


async def resolve_access_code(db: AsyncSession, code: str) -> AccessGrant:
    """Return who may submit with ``code``, or raise AuthenticationError.

    Plain equality lookup; a missing row and an inactive row are logged
    differently but look the same to the caller.
    """
    try:
        res = await db.execute(select(AccessCodeModel).where(AccessCodeModel.code == code))
    except (SQLAlchemyError, OSError) as exc:
        raise classify_storage_error(exc, expose_details=settings.is_development) from exc
    row = res.scalar_one_or_none()
    if row is None:
        logger.warning("Access code rejected: not found")
        raise AuthenticationError(reason="not_found")
    if not row.active:
        logger.warning("Access code rejected: inactive (user=%s, branch=%s)", row.user_name, row.branch_id)
        raise AuthenticationError(reason="inactive")
    return AccessGrant(code=row.code, branch_id=row.branch_id, user_name=row.user_name or UNKNOWN_USER)
