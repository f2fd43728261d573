import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column


class ActivationStatus(Base):
    """Per-doer activation gates.

    ``is_fully_activated`` is true only while all three gates are true; the
    tracker recomputes it after every change and never clears it.
    """

    __tablename__ = "doer_activation"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    doer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("doers.id"), unique=True, nullable=False
    )

    # Training gate
    training_completed: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    training_completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Quiz gate
    quiz_passed: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    quiz_passed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    quiz_attempt_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, nullable=True
    )  # Attempt that passed
    total_quiz_attempts: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )

    # Bank details gate
    bank_details_added: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    bank_details_added_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    is_fully_activated: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    activated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    @property
    def all_steps_done(self) -> bool:
        return bool(
            self.training_completed and self.quiz_passed and self.bank_details_added
        )

    def __repr__(self):
        return (
            f"<ActivationStatus doer={self.doer_id} training={self.training_completed} "
            f"quiz={self.quiz_passed} bank={self.bank_details_added} "
            f"activated={self.is_fully_activated}>"
        )
