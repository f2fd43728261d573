"""Doer-facing activation routes."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.common.rate_limit import limiter
from libs.db.session import get_async_db
from services.activation_service.models import QuizAttempt, QuizQuestion, TrainingModule
from services.activation_service.routers._shared import (
    get_tracker,
    raise_for_tracker_failure,
)
from services.activation_service.schemas import (
    ActivationState,
    BankDetailsCreate,
    BankDetailsResponse,
    QuizAttemptResponse,
    QuizQuestionPublic,
    QuizSubmission,
    TrainingModuleResponse,
    TrainingProgressUpdate,
)
from services.activation_service.services.tracker import (
    ActivationTracker,
    BankDetailsForm,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/activation", tags=["activation"])
logger = get_logger(__name__)
settings = get_settings()


# --- Status ---


@router.get("/me", response_model=ActivationState)
async def get_my_activation(tracker: ActivationTracker = Depends(get_tracker)):
    """Current activation state, creating the status row on first load."""
    state = await tracker.refresh()
    if state.error_message:
        raise_for_tracker_failure(state)
    return state


@router.post("/me/refresh", response_model=ActivationState)
async def refresh_my_activation(tracker: ActivationTracker = Depends(get_tracker)):
    state = await tracker.refresh()
    if state.error_message:
        raise_for_tracker_failure(state)
    return state


# --- Training ---


@router.get("/training-modules", response_model=List[TrainingModuleResponse])
async def list_training_modules(db: AsyncSession = Depends(get_async_db)):
    query = (
        select(TrainingModule)
        .where(TrainingModule.is_active.is_(True))
        .order_by(TrainingModule.order_index)
    )
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/me/training/{module_id}/complete", response_model=ActivationState)
async def complete_training_module(
    module_id: uuid.UUID,
    tracker: ActivationTracker = Depends(get_tracker),
):
    ok = await tracker.complete_training_module(module_id)
    if not ok:
        raise_for_tracker_failure(tracker.state)
    return await tracker.refresh()


@router.put("/me/training/{module_id}/progress", response_model=ActivationState)
async def update_training_progress(
    module_id: uuid.UUID,
    progress_in: TrainingProgressUpdate,
    tracker: ActivationTracker = Depends(get_tracker),
):
    ok = await tracker.update_training_progress(
        module_id, progress_in.progress_percent
    )
    if not ok:
        raise_for_tracker_failure(tracker.state)
    return await tracker.refresh()


# --- Quiz ---


@router.get("/quiz/questions", response_model=List[QuizQuestionPublic])
async def list_quiz_questions(db: AsyncSession = Depends(get_async_db)):
    """Active questions, without the answer key."""
    query = (
        select(QuizQuestion)
        .where(QuizQuestion.is_active.is_(True))
        .order_by(QuizQuestion.order_index)
    )
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/me/quiz", response_model=QuizAttemptResponse)
@limiter.limit(settings.RATE_LIMIT_QUIZ)
async def submit_quiz(
    request: Request,
    submission: QuizSubmission,
    tracker: ActivationTracker = Depends(get_tracker),
):
    attempt = await tracker.submit_quiz(submission.answers)
    if attempt is None:
        raise_for_tracker_failure(tracker.state)
    return attempt


@router.get("/me/quiz/attempts", response_model=List[QuizAttemptResponse])
async def list_my_quiz_attempts(tracker: ActivationTracker = Depends(get_tracker)):
    """Attempt history, newest first."""
    query = (
        select(QuizAttempt)
        .where(QuizAttempt.doer_id == tracker.ctx.doer_id)
        .order_by(QuizAttempt.attempt_number.desc())
    )
    result = await tracker.db.execute(query)
    return result.scalars().all()


# --- Bank details ---


@router.post(
    "/me/bank-details",
    response_model=ActivationState,
    status_code=status.HTTP_201_CREATED,
)
async def submit_bank_details(
    data: BankDetailsCreate,
    tracker: ActivationTracker = Depends(get_tracker),
):
    ok = await tracker.submit_bank_details(BankDetailsForm(**data.model_dump()))
    if not ok:
        raise_for_tracker_failure(tracker.state)
    return await tracker.refresh()


@router.get("/me/bank-details", response_model=BankDetailsResponse)
async def get_my_bank_details(tracker: ActivationTracker = Depends(get_tracker)):
    state = await tracker.refresh()
    if state.error_message:
        raise_for_tracker_failure(state)
    if state.bank_details is None:
        raise HTTPException(status_code=404, detail="No bank details found")
    return state.bank_details
