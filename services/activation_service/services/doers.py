"""Doer profile lookup."""

from typing import Optional

from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from services.activation_service.models import Doer
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_doer_by_auth_id(db: AsyncSession, auth_id: str) -> Optional[Doer]:
    result = await db.execute(select(Doer).where(Doer.auth_id == auth_id))
    return result.scalar_one_or_none()


async def get_or_create_doer(db: AsyncSession, user: AuthUser) -> Doer:
    """Return the doer row for an auth user, creating it on first sight.

    Two first requests racing each other both try the insert; the loser
    re-reads the winner's row.
    """
    doer = await get_doer_by_auth_id(db, user.user_id)
    if doer:
        return doer

    doer = Doer(
        auth_id=user.user_id,
        email=str(user.email) if user.email else None,
        full_name=user.full_name,
    )
    db.add(doer)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        existing = await get_doer_by_auth_id(db, user.user_id)
        if existing is None:
            raise
        return existing

    await db.refresh(doer)
    logger.info("Created doer %s for auth user %s", doer.id, user.user_id)
    return doer
