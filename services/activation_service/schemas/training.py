from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from services.activation_service.models import TrainingModuleType

# --- Training Module Schemas ---


class TrainingModuleBase(BaseModel):
    title: str
    description: Optional[str] = None
    module_type: TrainingModuleType = TrainingModuleType.VIDEO
    content_url: str
    duration_minutes: int = Field(default=0, ge=0)
    order_index: int = 0
    is_required: bool = True
    is_active: bool = True


class TrainingModuleCreate(TrainingModuleBase):
    pass


class TrainingModuleUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    module_type: Optional[TrainingModuleType] = None
    content_url: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    order_index: Optional[int] = None
    is_required: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator(
        "title",
        "module_type",
        "content_url",
        "duration_minutes",
        "order_index",
        "is_required",
        "is_active",
    )
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; only description can be cleared
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class TrainingModuleResponse(TrainingModuleBase):
    id: UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Training Progress Schemas ---


class TrainingProgressUpdate(BaseModel):
    progress_percent: int = Field(..., ge=0, le=100)


class TrainingProgressResponse(BaseModel):
    id: UUID
    doer_id: UUID
    module_id: UUID
    is_completed: bool
    progress_percent: int
    started_at: datetime
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
