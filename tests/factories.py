"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    module = TrainingModuleFactory.create(order_index=2)
    db_session.add(module)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timezone

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _unique_email() -> str:
    return f"doer-{uuid.uuid4().hex[:8]}@test.com"


# ---------------------------------------------------------------------------
# Doers
# ---------------------------------------------------------------------------


class DoerFactory:
    @staticmethod
    def create(**overrides):
        from services.activation_service.models import Doer

        defaults = {
            "id": _uuid(),
            "auth_id": f"auth-{uuid.uuid4().hex[:8]}",
            "email": _unique_email(),
            "full_name": "Test Doer",
            "is_activated": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        return Doer(**defaults)


# ---------------------------------------------------------------------------
# Training
# ---------------------------------------------------------------------------


class TrainingModuleFactory:
    @staticmethod
    def create(**overrides):
        from services.activation_service.models import (
            TrainingModule,
            TrainingModuleType,
        )

        defaults = {
            "id": _uuid(),
            "title": f"Module {uuid.uuid4().hex[:6]}",
            "description": "Test training module",
            "module_type": TrainingModuleType.VIDEO,
            "content_url": "https://example.com/video.mp4",
            "duration_minutes": 10,
            "order_index": 1,
            "is_required": True,
            "is_active": True,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return TrainingModule(**defaults)


# ---------------------------------------------------------------------------
# Quiz
# ---------------------------------------------------------------------------


class QuizQuestionFactory:
    @staticmethod
    def create(**overrides):
        from services.activation_service.models import QuizQuestion

        defaults = {
            "id": _uuid(),
            "question_text": f"Question {uuid.uuid4().hex[:6]}?",
            "options": ["A", "B", "C", "D"],
            "correct_option_index": 1,
            "explanation": None,
            "order_index": 1,
            "is_active": True,
            "created_at": _now(),
        }
        defaults.update(overrides)
        return QuizQuestion(**defaults)


class QuizAttemptFactory:
    @staticmethod
    def create(doer_id=None, **overrides):
        from services.activation_service.models import QuizAttempt

        defaults = {
            "id": _uuid(),
            "doer_id": doer_id or _uuid(),
            "score": 0,
            "total_questions": 10,
            "passed": False,
            "attempt_number": 1,
            "answers": [],
            "attempted_at": _now(),
        }
        defaults.update(overrides)
        return QuizAttempt(**defaults)


# ---------------------------------------------------------------------------
# Seeding helpers
# ---------------------------------------------------------------------------


async def seed_modules(db, count=3, **overrides):
    modules = [
        TrainingModuleFactory.create(order_index=i, **overrides)
        for i in range(1, count + 1)
    ]
    db.add_all(modules)
    await db.commit()
    return modules


async def seed_questions(db, count=10):
    """Questions whose correct answer is always option 1."""
    questions = [
        QuizQuestionFactory.create(order_index=i, correct_option_index=1)
        for i in range(1, count + 1)
    ]
    db.add_all(questions)
    await db.commit()
    return questions


def answers_with_score(questions, correct: int) -> dict:
    """Answer the first ``correct`` questions right and the rest wrong."""
    return {
        str(q.id): q.correct_option_index if i < correct else 0
        for i, q in enumerate(questions)
    }
