"""Enums for the Activation Service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class TrainingModuleType(str, enum.Enum):
    VIDEO = "video"
    PDF = "pdf"
    ARTICLE = "article"


class ActivationStep(str, enum.Enum):
    """First unmet gate, in the order the app walks a doer through them."""

    TRAINING = "training"
    QUIZ = "quiz"
    BANK_DETAILS = "bank_details"
    ACTIVATED = "activated"


class SyncStatus(str, enum.Enum):
    SYNCED = "synced"
    FAILED = "failed"
