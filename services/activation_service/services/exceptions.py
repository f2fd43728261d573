"""Domain refusals inside the activation tracker.

These never leave the tracker's public operations: the tracker catches
them, records ``code`` and ``message`` on its state and returns the
operation's failure value. Routers map the code to an HTTP status.
"""

import uuid
from typing import Union

MODULE_NOT_FOUND = "module_not_found"
QUIZ_RATE_LIMITED = "quiz_rate_limited"


class ActivationError(Exception):
    """Base class for activation domain errors."""

    code = "activation_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class TrainingModuleNotFoundError(ActivationError):
    code = MODULE_NOT_FOUND

    def __init__(self, module_id: Union[str, uuid.UUID]):
        super().__init__(f"Training module {module_id} not found")
        self.module_id = module_id


class QuizRateLimitedError(ActivationError):
    code = QUIZ_RATE_LIMITED

    def __init__(self, retry_after_minutes: int):
        super().__init__(
            f"Too many quiz attempts. Try again in {retry_after_minutes} minute(s)."
        )
        self.retry_after_minutes = retry_after_minutes
