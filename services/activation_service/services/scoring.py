"""
Quiz scoring.

Pure functions with no database dependencies for easy testing.
"""

from dataclasses import dataclass, field
from typing import Mapping, Protocol, Sequence

# Selected index recorded for a question the doer skipped
UNANSWERED = -1


class ScorableQuestion(Protocol):
    id: object
    correct_option_index: int


@dataclass
class QuizScore:
    score: int
    total_questions: int
    passed: bool
    answers: list[dict] = field(default_factory=list)

    @property
    def fraction(self) -> float:
        if not self.total_questions:
            return 0.0
        return self.score / self.total_questions


def score_quiz(
    questions: Sequence[ScorableQuestion],
    answers: Mapping[str, int],
    pass_threshold: float,
) -> QuizScore:
    """
    Score submitted answers against the question key.

    Rules:
    - Questions are scored in the order given; answers for unknown question
      ids are ignored.
    - A question missing from ``answers`` counts as UNANSWERED (incorrect).
    - passed = score / total >= pass_threshold, compared as a fraction.
    - An empty question set never passes.
    """
    score = 0
    graded: list[dict] = []

    for question in questions:
        question_id = str(question.id)
        selected = answers.get(question_id, UNANSWERED)
        is_correct = selected == question.correct_option_index
        if is_correct:
            score += 1
        graded.append(
            {
                "question_id": question_id,
                "selected_option_index": selected,
                "is_correct": is_correct,
            }
        )

    total = len(questions)
    passed = total > 0 and (score / total) >= pass_threshold
    return QuizScore(score=score, total_questions=total, passed=passed, answers=graded)
