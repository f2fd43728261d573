"""Dependencies shared by the activation routers."""

from fastapi import Depends, HTTPException, Request, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.events import EventBus
from libs.db.session import get_async_db
from services.activation_service.schemas import ActivationState
from services.activation_service.services.context import ActivationContext
from services.activation_service.services.doers import get_or_create_doer
from services.activation_service.services.exceptions import (
    MODULE_NOT_FOUND,
    QUIZ_RATE_LIMITED,
)
from services.activation_service.services.tracker import ActivationTracker
from sqlalchemy.ext.asyncio import AsyncSession


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus


async def get_activation_context(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
    bus: EventBus = Depends(get_event_bus),
) -> ActivationContext:
    doer = await get_or_create_doer(db, current_user)
    return ActivationContext(db=db, bus=bus, doer_id=doer.id)


def get_tracker(
    ctx: ActivationContext = Depends(get_activation_context),
) -> ActivationTracker:
    return ActivationTracker(ctx)


REFUSAL_STATUS = {
    MODULE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    QUIZ_RATE_LIMITED: status.HTTP_429_TOO_MANY_REQUESTS,
}


def raise_for_tracker_failure(state: ActivationState) -> None:
    """Raise the HTTP error matching the tracker's last failed operation.

    Refusals map to their own status; anything else was a storage failure.
    """
    status_code = REFUSAL_STATUS.get(state.error_code)
    if status_code is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=state.error_message or "Activation data could not be saved",
        )

    headers = None
    if state.retry_after_minutes is not None:
        headers = {"Retry-After": str(state.retry_after_minutes * 60)}
    raise HTTPException(
        status_code=status_code, detail=state.error_message, headers=headers
    )
