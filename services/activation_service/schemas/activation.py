from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, computed_field
from services.activation_service.models import ActivationStep, SyncStatus
from services.activation_service.schemas.bank import BankDetailsResponse
from services.activation_service.schemas.quiz import (
    QuizAttemptResponse,
    QuizQuestionPublic,
)
from services.activation_service.schemas.training import (
    TrainingModuleResponse,
    TrainingProgressResponse,
)


class ActivationStatusResponse(BaseModel):
    id: UUID
    doer_id: UUID
    training_completed: bool
    training_completed_at: Optional[datetime] = None
    quiz_passed: bool
    quiz_passed_at: Optional[datetime] = None
    quiz_attempt_id: Optional[UUID] = None
    total_quiz_attempts: int = 0
    bank_details_added: bool
    bank_details_added_at: Optional[datetime] = None
    is_fully_activated: bool
    created_at: datetime
    activated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def current_step(self) -> ActivationStep:
        if not self.training_completed:
            return ActivationStep.TRAINING
        if not self.quiz_passed:
            return ActivationStep.QUIZ
        if not self.bank_details_added:
            return ActivationStep.BANK_DETAILS
        return ActivationStep.ACTIVATED


class ActivationState(BaseModel):
    """Snapshot of a doer's activation data.

    Replaced wholesale (``model_copy``) by the tracker, and only after the
    matching database write has committed.
    """

    doer_id: Optional[UUID] = None
    status: Optional[ActivationStatusResponse] = None
    training_modules: List[TrainingModuleResponse] = []
    # Keyed by module id
    training_progress: Dict[str, TrainingProgressResponse] = {}
    quiz_questions: List[QuizQuestionPublic] = []
    last_quiz_attempt: Optional[QuizAttemptResponse] = None
    bank_details: Optional[BankDetailsResponse] = None
    is_loading: bool = False
    error_message: Optional[str] = None
    # Set when the last operation was refused rather than failed to persist
    error_code: Optional[str] = None
    retry_after_minutes: Optional[int] = None
    sync_status: SyncStatus = SyncStatus.SYNCED

    @computed_field
    @property
    def required_modules(self) -> int:
        return sum(1 for m in self.training_modules if m.is_required and m.is_active)

    @computed_field
    @property
    def completed_modules(self) -> int:
        return sum(
            1
            for m in self.training_modules
            if m.is_required
            and m.is_active
            and (progress := self.training_progress.get(str(m.id))) is not None
            and progress.is_completed
        )

    @computed_field
    @property
    def training_percent(self) -> int:
        if not self.required_modules:
            return 0
        return round(self.completed_modules / self.required_modules * 100)

    @computed_field
    @property
    def is_fully_activated(self) -> bool:
        return bool(self.status and self.status.is_fully_activated)

    @computed_field
    @property
    def current_step(self) -> ActivationStep:
        if self.status is None:
            return ActivationStep.TRAINING
        return self.status.current_step
