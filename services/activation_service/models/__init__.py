"""Activation Service models package.

Re-exports all models and enums so that:
  - ``from services.activation_service.models import ActivationStatus`` works
  - Alembic env.py sees every table through one import
  - SQLAlchemy's mapper registry sees every model class on import

When adding a new model, add both its import and its __all__ entry.
"""

from services.activation_service.models.activation import ActivationStatus  # noqa: F401
from services.activation_service.models.bank import BankDetails  # noqa: F401
from services.activation_service.models.doer import Doer  # noqa: F401
from services.activation_service.models.enums import (  # noqa: F401
    ActivationStep,
    SyncStatus,
    TrainingModuleType,
)
from services.activation_service.models.quiz import QuizAttempt, QuizQuestion  # noqa: F401
from services.activation_service.models.training import (  # noqa: F401
    TrainingModule,
    TrainingProgress,
)

__all__ = [
    # Enums
    "ActivationStep",
    "SyncStatus",
    "TrainingModuleType",
    # Models
    "ActivationStatus",
    "BankDetails",
    "Doer",
    "QuizAttempt",
    "QuizQuestion",
    "TrainingModule",
    "TrainingProgress",
]
