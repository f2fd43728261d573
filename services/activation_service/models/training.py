import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.activation_service.models.enums import TrainingModuleType, enum_values
from sqlalchemy import Boolean, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import (
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    false,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# TRAINING MODELS
# ============================================================================


class TrainingModule(Base):
    __tablename__ = "training_modules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    module_type: Mapped[TrainingModuleType] = mapped_column(
        SAEnum(
            TrainingModuleType,
            name="training_module_type_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        default=TrainingModuleType.VIDEO,
    )
    content_url: Mapped[str] = mapped_column(String, nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=0)
    order_index: Mapped[int] = mapped_column(Integer, default=0, server_default="0")

    # Only active, required modules gate activation
    is_required: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true()
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, default=True, server_default=true()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )

    def __repr__(self):
        return f"<TrainingModule {self.order_index}: {self.title}>"


class TrainingProgress(Base):
    __tablename__ = "training_progress"
    __table_args__ = (
        UniqueConstraint("doer_id", "module_id", name="uq_training_progress_doer_module"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    doer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("doers.id"), index=True, nullable=False
    )
    module_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("training_modules.id"), nullable=False
    )
    is_completed: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false()
    )
    progress_percent: Mapped[int] = mapped_column(
        Integer, default=0, server_default="0"
    )  # 0-100
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
