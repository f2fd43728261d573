from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# --- Quiz Question Schemas ---


class QuizQuestionBase(BaseModel):
    question_text: str
    options: List[str] = Field(..., min_length=2)
    explanation: Optional[str] = None
    order_index: int = 0
    is_active: bool = True


class QuizQuestionCreate(QuizQuestionBase):
    correct_option_index: int = Field(..., ge=0)

    @model_validator(mode="after")
    def check_correct_index(self):
        if self.correct_option_index >= len(self.options):
            raise ValueError("correct_option_index must point at one of the options")
        return self


class QuizQuestionUpdate(BaseModel):
    question_text: Optional[str] = None
    options: Optional[List[str]] = Field(default=None, min_length=2)
    correct_option_index: Optional[int] = Field(default=None, ge=0)
    explanation: Optional[str] = None
    order_index: Optional[int] = None
    is_active: Optional[bool] = None

    @field_validator(
        "question_text",
        "options",
        "correct_option_index",
        "order_index",
        "is_active",
    )
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class QuizQuestionPublic(BaseModel):
    """Question as shown to doers. Never carries the correct answer."""

    id: UUID
    question_text: str
    options: List[str]
    order_index: int

    model_config = ConfigDict(from_attributes=True)


class QuizQuestionResponse(QuizQuestionBase):
    """Admin view, including the answer key."""

    id: UUID
    correct_option_index: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Quiz Attempt Schemas ---


class QuizSubmission(BaseModel):
    # question id -> selected option index
    answers: Dict[str, int]


class QuizAnswerResponse(BaseModel):
    question_id: str
    selected_option_index: int
    is_correct: bool


class QuizAttemptResponse(BaseModel):
    id: UUID
    doer_id: UUID
    score: int
    total_questions: int
    passed: bool
    attempt_number: int
    answers: List[QuizAnswerResponse] = []
    attempted_at: datetime

    model_config = ConfigDict(from_attributes=True)
