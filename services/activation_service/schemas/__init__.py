"""Activation Service schemas package."""

from services.activation_service.schemas.activation import (  # noqa: F401
    ActivationState,
    ActivationStatusResponse,
)
from services.activation_service.schemas.bank import (  # noqa: F401
    BankDetailsCreate,
    BankDetailsResponse,
    mask_account_number,
)
from services.activation_service.schemas.quiz import (  # noqa: F401
    QuizAnswerResponse,
    QuizAttemptResponse,
    QuizQuestionCreate,
    QuizQuestionPublic,
    QuizQuestionResponse,
    QuizQuestionUpdate,
    QuizSubmission,
)
from services.activation_service.schemas.training import (  # noqa: F401
    TrainingModuleCreate,
    TrainingModuleResponse,
    TrainingModuleUpdate,
    TrainingProgressResponse,
    TrainingProgressUpdate,
)

__all__ = [
    "ActivationState",
    "ActivationStatusResponse",
    "BankDetailsCreate",
    "BankDetailsResponse",
    "mask_account_number",
    "QuizAnswerResponse",
    "QuizAttemptResponse",
    "QuizQuestionCreate",
    "QuizQuestionPublic",
    "QuizQuestionResponse",
    "QuizQuestionUpdate",
    "QuizSubmission",
    "TrainingModuleCreate",
    "TrainingModuleResponse",
    "TrainingModuleUpdate",
    "TrainingProgressResponse",
    "TrainingProgressUpdate",
]
