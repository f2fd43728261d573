"""Event listeners for activation side effects."""

import uuid
from datetime import datetime
from typing import Any, Dict

from libs.common.events import EventBus, ListenerPriority
from libs.common.logging import get_logger
from services.activation_service.models import Doer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

DOER_ACTIVATED = "doer.activated"


async def mark_doer_activated(
    db: AsyncSession, doer_id: uuid.UUID, activated_at: datetime
) -> bool:
    """Flag the doer profile as activated. Returns True if it changed.

    Does not commit; the caller owns the transaction.
    """
    doer = await db.get(Doer, doer_id)
    if doer is None:
        logger.warning("Activated doer %s has no profile row", doer_id)
        return False
    if doer.is_activated:
        return False

    doer.is_activated = True
    doer.activated_at = activated_at
    return True


async def refresh_doer_profile(data: Dict[str, Any]) -> None:
    """Mark the doer's profile activated so every consumer sees the unlock."""
    db = data["db"]
    try:
        changed = await mark_doer_activated(db, data["doer_id"], data["activated_at"])
        if not changed:
            return
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    logger.info("Doer %s profile marked activated", data["doer_id"])


def register_listeners(bus: EventBus) -> None:
    bus.subscribe(DOER_ACTIVATED, refresh_doer_profile, priority=ListenerPriority.HIGH)
