"""Doer activation tracker.

A doer is fully activated once three gates are passed, in any order:
training (every active, required module completed), the quiz (passed at or
above the configured threshold) and bank details (submitted). The tracker
owns those gates for one doer and flips ``is_fully_activated`` the moment
all three hold. Once set it is never cleared.

Each public operation runs as one unit of work: load the rows it needs,
mutate, commit. ``self.state`` is replaced only after the commit succeeds,
so a failed write leaves the last good snapshot in place. Transient
database errors are retried by the context's retry policy; anything else
rolls back, records an error message on the state and returns the
operation's failure value.
"""

import math
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Mapping, Optional, TypeVar, Union

from libs.common.datetime_utils import as_utc, utc_now
from libs.common.logging import get_logger
from services.activation_service.models import (
    ActivationStatus,
    BankDetails,
    QuizAttempt,
    QuizQuestion,
    SyncStatus,
    TrainingModule,
    TrainingProgress,
)
from services.activation_service.schemas import (
    ActivationState,
    ActivationStatusResponse,
    BankDetailsResponse,
    QuizAttemptResponse,
    QuizQuestionPublic,
    TrainingModuleResponse,
    TrainingProgressResponse,
)
from services.activation_service.services.context import ActivationContext
from services.activation_service.services.exceptions import (
    ActivationError,
    QuizRateLimitedError,
    TrainingModuleNotFoundError,
)
from services.activation_service.services.listeners import (
    DOER_ACTIVATED,
    mark_doer_activated,
)
from services.activation_service.services.scoring import score_quiz
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = get_logger(__name__)

T = TypeVar("T")

QUIZ_RATE_WINDOW = timedelta(hours=1)


@dataclass
class BankDetailsForm:
    """Bank form data as handed over by the form layer (already validated)."""

    account_holder_name: str
    account_number: str
    ifsc_code: str
    bank_name: Optional[str] = None
    upi_id: Optional[str] = None


class ActivationTracker:
    def __init__(self, ctx: ActivationContext):
        self.ctx = ctx
        self.state = ActivationState(doer_id=ctx.doer_id)

    @property
    def db(self):
        return self.ctx.db

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def refresh(self) -> ActivationState:
        """Reload every activation collection for the current doer."""
        if not self.ctx.is_authenticated:
            return self.state

        self.state = self.state.model_copy(
            update={
                "is_loading": True,
                "error_message": None,
                "error_code": None,
                "retry_after_minutes": None,
            }
        )

        async def work() -> ActivationState:
            status = await self._get_or_create_status()
            modules = await self._active_modules()
            progress = await self._progress_rows()
            questions = await self._active_questions()
            last_attempt = await self._last_attempt()
            bank_details = await self._latest_bank_details()
            if status.is_fully_activated and status.activated_at is not None:
                # Repairs a profile the activation listener failed to update
                if await mark_doer_activated(
                    self.db, self.ctx.doer_id, status.activated_at
                ):
                    logger.warning(
                        "Doer %s profile was not marked activated; repaired",
                        self.ctx.doer_id,
                    )
            # Persists the status row when this is the doer's first load
            await self.db.commit()
            return ActivationState(
                doer_id=self.ctx.doer_id,
                status=ActivationStatusResponse.model_validate(status),
                training_modules=[
                    TrainingModuleResponse.model_validate(m) for m in modules
                ],
                training_progress={
                    str(p.module_id): TrainingProgressResponse.model_validate(p)
                    for p in progress
                },
                quiz_questions=[QuizQuestionPublic.model_validate(q) for q in questions],
                last_quiz_attempt=(
                    QuizAttemptResponse.model_validate(last_attempt)
                    if last_attempt
                    else None
                ),
                bank_details=(
                    BankDetailsResponse.model_validate(bank_details)
                    if bank_details
                    else None
                ),
            )

        try:
            self.state = await self._run(work, "activation.refresh")
        except SQLAlchemyError as exc:
            await self._fail("Failed to load activation data", exc)
        return self.state

    # ------------------------------------------------------------------
    # Training
    # ------------------------------------------------------------------

    async def complete_training_module(self, module_id: Union[str, uuid.UUID]) -> bool:
        """Mark a module complete for the doer and re-check the training gate.

        Idempotent per (doer, module). Returns False for unknown or inactive
        modules (``state.error_code`` is MODULE_NOT_FOUND) and for storage
        failures.
        """
        if not self.ctx.is_authenticated:
            return False

        async def work():
            module_uuid = _parse_uuid(module_id)
            module = await self.db.get(TrainingModule, module_uuid)
            if module is None or not module.is_active:
                raise TrainingModuleNotFoundError(module_id)

            now = utc_now()
            progress = await self._progress_row(module.id)
            if progress is None:
                progress = TrainingProgress(
                    doer_id=self.ctx.doer_id, module_id=module.id, started_at=now
                )
                self.db.add(progress)
            progress.is_completed = True
            progress.progress_percent = 100
            progress.completed_at = now
            await self.db.flush()

            status = await self._get_or_create_status()
            if not status.training_completed and await self._all_training_done():
                status.training_completed = True
                status.training_completed_at = now
                logger.info("Doer %s completed training", self.ctx.doer_id)
            activated = self._evaluate_full_activation(status, now)

            await self.db.commit()
            return progress, status, activated

        try:
            progress, status, activated = await self._run(
                work, "activation.complete_training_module"
            )
        except ActivationError as exc:
            await self._refuse(exc)
            return False
        except SQLAlchemyError as exc:
            await self._fail("Failed to update training progress. Please try again.", exc)
            return False

        self._commit_state(status=status, progress=progress)
        if activated:
            await self._notify_activated(status)
        return True

    async def update_training_progress(
        self, module_id: Union[str, uuid.UUID], percent: int
    ) -> bool:
        """Record partial progress on a module; 100 completes it.

        Progress never moves backwards and a completed module stays completed.
        """
        if percent >= 100:
            return await self.complete_training_module(module_id)
        if not self.ctx.is_authenticated:
            return False
        percent = max(0, percent)

        async def work():
            module = await self.db.get(TrainingModule, _parse_uuid(module_id))
            if module is None or not module.is_active:
                raise TrainingModuleNotFoundError(module_id)

            progress = await self._progress_row(module.id)
            if progress is None:
                progress = TrainingProgress(
                    doer_id=self.ctx.doer_id,
                    module_id=module.id,
                    started_at=utc_now(),
                    progress_percent=percent,
                )
                self.db.add(progress)
            elif not progress.is_completed:
                progress.progress_percent = max(progress.progress_percent, percent)

            await self.db.commit()
            return progress

        try:
            progress = await self._run(work, "activation.update_training_progress")
        except ActivationError as exc:
            await self._refuse(exc)
            return False
        except SQLAlchemyError as exc:
            await self._fail("Failed to update training progress. Please try again.", exc)
            return False

        self._commit_state(progress=progress)
        return True

    # ------------------------------------------------------------------
    # Quiz
    # ------------------------------------------------------------------

    async def submit_quiz(
        self, answers: Mapping[str, int]
    ) -> Optional[QuizAttemptResponse]:
        """Score and record a quiz attempt.

        Returns the attempt, or None when there is no authenticated doer, the
        write failed, or the doer has used up the attempts allowed in the
        trailing hour (``state.error_code`` is QUIZ_RATE_LIMITED).
        """
        if not self.ctx.is_authenticated:
            return None

        async def work():
            now = utc_now()
            await self._check_quiz_rate_limit(now)

            questions = await self._active_questions()
            result = score_quiz(
                questions, answers, self.ctx.settings.QUIZ_PASS_THRESHOLD
            )

            previous = await self.db.scalar(
                select(func.max(QuizAttempt.attempt_number)).where(
                    QuizAttempt.doer_id == self.ctx.doer_id
                )
            )
            attempt = QuizAttempt(
                doer_id=self.ctx.doer_id,
                score=result.score,
                total_questions=result.total_questions,
                passed=result.passed,
                attempt_number=(previous or 0) + 1,
                answers=result.answers,
                attempted_at=now,
            )
            self.db.add(attempt)
            await self.db.flush()

            status = await self._get_or_create_status()
            status.total_quiz_attempts = (status.total_quiz_attempts or 0) + 1
            # A failed attempt never takes away an earlier pass
            if result.passed and not status.quiz_passed:
                status.quiz_passed = True
                status.quiz_passed_at = now
                status.quiz_attempt_id = attempt.id
            activated = self._evaluate_full_activation(status, now)

            await self.db.commit()
            return attempt, status, activated

        try:
            attempt, status, activated = await self._run(work, "activation.submit_quiz")
        except ActivationError as exc:
            await self._refuse(exc)
            return None
        except SQLAlchemyError as exc:
            await self._fail("Failed to submit quiz. Please try again.", exc)
            return None

        snapshot = QuizAttemptResponse.model_validate(attempt)
        self._commit_state(status=status, last_quiz_attempt=snapshot)
        logger.info(
            "Doer %s quiz attempt %d: %d/%d passed=%s",
            self.ctx.doer_id,
            snapshot.attempt_number,
            snapshot.score,
            snapshot.total_questions,
            snapshot.passed,
        )
        if activated:
            await self._notify_activated(status)
        return snapshot

    async def _check_quiz_rate_limit(self, now: datetime) -> None:
        limit = self.ctx.settings.QUIZ_MAX_ATTEMPTS_PER_HOUR
        if limit <= 0:
            return

        result = await self.db.execute(
            select(QuizAttempt.attempted_at)
            .where(
                QuizAttempt.doer_id == self.ctx.doer_id,
                QuizAttempt.attempted_at >= now - QUIZ_RATE_WINDOW,
            )
            .order_by(QuizAttempt.attempted_at.asc())
        )
        recent = result.scalars().all()
        if len(recent) < limit:
            return

        # The window reopens when the oldest attempt in it ages out
        retry_at = as_utc(recent[0]) + QUIZ_RATE_WINDOW
        minutes = math.ceil((retry_at - now).total_seconds() / 60)
        logger.warning("Quiz rate limit exceeded for doer %s", self.ctx.doer_id)
        raise QuizRateLimitedError(retry_after_minutes=max(minutes, 1))

    # ------------------------------------------------------------------
    # Bank details
    # ------------------------------------------------------------------

    async def submit_bank_details(self, form: BankDetailsForm) -> bool:
        """Store the doer's payout account and pass the bank details gate.

        Every call inserts a new, unverified row. Format checks belong to
        the form layer.
        """
        if not self.ctx.is_authenticated:
            return False

        async def work():
            now = utc_now()
            details = BankDetails(
                doer_id=self.ctx.doer_id,
                account_holder_name=form.account_holder_name,
                account_number=form.account_number,
                ifsc_code=form.ifsc_code,
                bank_name=form.bank_name,
                upi_id=form.upi_id,
                is_verified=False,
                created_at=now,
            )
            self.db.add(details)

            status = await self._get_or_create_status()
            if not status.bank_details_added:
                status.bank_details_added = True
                status.bank_details_added_at = now
            activated = self._evaluate_full_activation(status, now)

            await self.db.commit()
            return details, status, activated

        try:
            details, status, activated = await self._run(
                work, "activation.submit_bank_details"
            )
        except SQLAlchemyError as exc:
            await self._fail("Failed to save bank details. Please try again.", exc)
            return False

        self._commit_state(
            status=status, bank_details=BankDetailsResponse.model_validate(details)
        )
        if activated:
            await self._notify_activated(status)
        return True

    # ------------------------------------------------------------------
    # Full activation
    # ------------------------------------------------------------------

    def _evaluate_full_activation(self, status: ActivationStatus, now: datetime) -> bool:
        """Flip the terminal flag when every gate holds.

        Returns True only on the transition, so the activation event is
        published once per doer.
        """
        if status.is_fully_activated or not status.all_steps_done:
            return False
        status.is_fully_activated = True
        status.activated_at = now
        return True

    async def _notify_activated(self, status: ActivationStatus) -> None:
        logger.info("Doer %s is fully activated", self.ctx.doer_id)
        await self.ctx.bus.publish(
            DOER_ACTIVATED,
            {
                "doer_id": self.ctx.doer_id,
                "activated_at": status.activated_at,
                "db": self.db,
            },
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run(self, work: Callable[[], Awaitable[T]], operation_name: str) -> T:
        return await self.ctx.retry.execute(
            work, operation_name=operation_name, before_retry=self.db.rollback
        )

    async def _fail(self, message: str, exc: Exception) -> None:
        logger.error(
            "%s for doer %s: %s", message, self.ctx.doer_id, exc, exc_info=exc
        )
        await self.db.rollback()
        self.state = self.state.model_copy(
            update={
                "is_loading": False,
                "error_message": message,
                "error_code": None,
                "retry_after_minutes": None,
                "sync_status": SyncStatus.FAILED,
            }
        )

    async def _refuse(self, exc: ActivationError) -> None:
        logger.info("Doer %s: %s", self.ctx.doer_id, exc.message)
        await self.db.rollback()
        self.state = self.state.model_copy(
            update={
                "is_loading": False,
                "error_message": exc.message,
                "error_code": exc.code,
                "retry_after_minutes": getattr(exc, "retry_after_minutes", None),
            }
        )

    def _commit_state(
        self,
        *,
        status: Optional[ActivationStatus] = None,
        progress: Optional[TrainingProgress] = None,
        last_quiz_attempt: Optional[QuizAttemptResponse] = None,
        bank_details: Optional[BankDetailsResponse] = None,
    ) -> None:
        update: dict = {
            "is_loading": False,
            "error_message": None,
            "error_code": None,
            "retry_after_minutes": None,
            "sync_status": SyncStatus.SYNCED,
        }
        if status is not None:
            update["status"] = ActivationStatusResponse.model_validate(status)
        if progress is not None:
            update["training_progress"] = {
                **self.state.training_progress,
                str(progress.module_id): TrainingProgressResponse.model_validate(
                    progress
                ),
            }
        if last_quiz_attempt is not None:
            update["last_quiz_attempt"] = last_quiz_attempt
        if bank_details is not None:
            update["bank_details"] = bank_details
        self.state = self.state.model_copy(update=update)

    async def _get_or_create_status(self) -> ActivationStatus:
        status = await self._status_row()
        if status is not None:
            return status

        status = ActivationStatus(doer_id=self.ctx.doer_id)
        try:
            async with self.db.begin_nested():
                self.db.add(status)
        except IntegrityError:
            # Created concurrently by another request for the same doer
            status = await self._status_row()
            if status is None:
                raise
        return status

    async def _status_row(self) -> Optional[ActivationStatus]:
        result = await self.db.execute(
            select(ActivationStatus).where(
                ActivationStatus.doer_id == self.ctx.doer_id
            )
        )
        return result.scalar_one_or_none()

    async def _active_modules(self) -> list[TrainingModule]:
        result = await self.db.execute(
            select(TrainingModule)
            .where(TrainingModule.is_active.is_(True))
            .order_by(TrainingModule.order_index)
        )
        return list(result.scalars().all())

    async def _progress_rows(self) -> list[TrainingProgress]:
        result = await self.db.execute(
            select(TrainingProgress).where(
                TrainingProgress.doer_id == self.ctx.doer_id
            )
        )
        return list(result.scalars().all())

    async def _progress_row(self, module_id: uuid.UUID) -> Optional[TrainingProgress]:
        result = await self.db.execute(
            select(TrainingProgress).where(
                TrainingProgress.doer_id == self.ctx.doer_id,
                TrainingProgress.module_id == module_id,
            )
        )
        return result.scalar_one_or_none()

    async def _all_training_done(self) -> bool:
        """True when every active, required module has a completed row.

        With no required modules the training gate stays closed.
        """
        required = await self.db.scalar(
            select(func.count())
            .select_from(TrainingModule)
            .where(
                TrainingModule.is_active.is_(True),
                TrainingModule.is_required.is_(True),
            )
        )
        if not required:
            return False

        completed = await self.db.scalar(
            select(func.count())
            .select_from(TrainingProgress)
            .join(TrainingModule, TrainingModule.id == TrainingProgress.module_id)
            .where(
                TrainingProgress.doer_id == self.ctx.doer_id,
                TrainingProgress.is_completed.is_(True),
                TrainingModule.is_active.is_(True),
                TrainingModule.is_required.is_(True),
            )
        )
        return completed >= required

    async def _active_questions(self) -> list[QuizQuestion]:
        result = await self.db.execute(
            select(QuizQuestion)
            .where(QuizQuestion.is_active.is_(True))
            .order_by(QuizQuestion.order_index)
        )
        return list(result.scalars().all())

    async def _last_attempt(self) -> Optional[QuizAttempt]:
        result = await self.db.execute(
            select(QuizAttempt)
            .where(QuizAttempt.doer_id == self.ctx.doer_id)
            .order_by(QuizAttempt.attempt_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _latest_bank_details(self) -> Optional[BankDetails]:
        result = await self.db.execute(
            select(BankDetails)
            .where(BankDetails.doer_id == self.ctx.doer_id)
            .order_by(BankDetails.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()


def _parse_uuid(value: Union[str, uuid.UUID]) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise TrainingModuleNotFoundError(value)
