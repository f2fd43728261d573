"""Admin routes for activation reference data."""

import uuid
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.activation_service.models import (
    ActivationStatus,
    Doer,
    QuizQuestion,
    TrainingModule,
)
from services.activation_service.schemas import (
    ActivationStatusResponse,
    QuizQuestionCreate,
    QuizQuestionResponse,
    QuizQuestionUpdate,
    TrainingModuleCreate,
    TrainingModuleResponse,
    TrainingModuleUpdate,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/activation/admin", tags=["activation-admin"])
logger = get_logger(__name__)


# --- Training modules ---


@router.post(
    "/training-modules",
    response_model=TrainingModuleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_training_module(
    module_in: TrainingModuleCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    module = TrainingModule(**module_in.model_dump())
    db.add(module)
    await db.commit()
    await db.refresh(module)
    logger.info("Training module %s created by %s", module.id, current_user.user_id)
    return module


@router.get("/training-modules", response_model=List[TrainingModuleResponse])
async def list_all_training_modules(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """All modules, including inactive ones."""
    result = await db.execute(select(TrainingModule).order_by(TrainingModule.order_index))
    return result.scalars().all()


@router.patch("/training-modules/{module_id}", response_model=TrainingModuleResponse)
async def update_training_module(
    module_id: uuid.UUID,
    module_in: TrainingModuleUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    module = await db.get(TrainingModule, module_id)
    if not module:
        raise HTTPException(status_code=404, detail="Training module not found")

    update_data = module_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(module, field, value)

    await db.commit()
    await db.refresh(module)
    return module


# --- Quiz questions ---


@router.post(
    "/quiz/questions",
    response_model=QuizQuestionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_quiz_question(
    question_in: QuizQuestionCreate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    question = QuizQuestion(**question_in.model_dump())
    db.add(question)
    await db.commit()
    await db.refresh(question)
    return question


@router.get("/quiz/questions", response_model=List[QuizQuestionResponse])
async def list_all_quiz_questions(
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    result = await db.execute(select(QuizQuestion).order_by(QuizQuestion.order_index))
    return result.scalars().all()


@router.patch("/quiz/questions/{question_id}", response_model=QuizQuestionResponse)
async def update_quiz_question(
    question_id: uuid.UUID,
    question_in: QuizQuestionUpdate,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    question = await db.get(QuizQuestion, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Quiz question not found")

    update_data = question_in.model_dump(exclude_unset=True)
    options = update_data.get("options", question.options)
    correct = update_data.get("correct_option_index", question.correct_option_index)
    if not 0 <= correct < len(options):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="correct_option_index must point at one of the options",
        )

    for field, value in update_data.items():
        setattr(question, field, value)

    await db.commit()
    await db.refresh(question)
    return question


# --- Doer status ---


@router.get("/doers/{doer_id}/status", response_model=ActivationStatusResponse)
async def get_doer_activation_status(
    doer_id: uuid.UUID,
    current_user: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    doer = await db.get(Doer, doer_id)
    if not doer:
        raise HTTPException(status_code=404, detail="Doer not found")

    result = await db.execute(
        select(ActivationStatus).where(ActivationStatus.doer_id == doer_id)
    )
    activation = result.scalar_one_or_none()
    if not activation:
        raise HTTPException(status_code=404, detail="Activation not started")
    return activation
