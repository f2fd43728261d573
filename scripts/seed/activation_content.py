"""Seed the onboarding training modules and quiz questions.

Idempotent: modules are matched by title and questions by text, so running
it twice leaves one copy of each.
"""

import asyncio
import os
import sys

# Add backend root to path so we can import modules
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from libs.db.config import AsyncSessionLocal
from services.activation_service.models import (
    QuizQuestion,
    TrainingModule,
    TrainingModuleType,
)
from sqlalchemy import select

TRAINING_MODULES = [
    {
        "title": "Welcome to DOER",
        "description": "Introduction to the platform and how it works",
        "module_type": TrainingModuleType.VIDEO,
        "content_url": "https://example.com/video1.mp4",
        "duration_minutes": 10,
        "order_index": 1,
    },
    {
        "title": "Project Guidelines",
        "description": "Learn how to handle projects professionally",
        "module_type": TrainingModuleType.PDF,
        "content_url": "https://example.com/guidelines.pdf",
        "duration_minutes": 15,
        "order_index": 2,
    },
    {
        "title": "Quality Standards",
        "description": "Understanding our quality requirements",
        "module_type": TrainingModuleType.VIDEO,
        "content_url": "https://example.com/video2.mp4",
        "duration_minutes": 12,
        "order_index": 3,
    },
    {
        "title": "Communication Best Practices",
        "description": "How to communicate with supervisors",
        "module_type": TrainingModuleType.ARTICLE,
        "content_url": "https://example.com/article1",
        "duration_minutes": 8,
        "order_index": 4,
    },
]

# (question, options, correct index, explanation)
QUIZ_QUESTIONS = [
    (
        "What is the primary focus of DOER platform?",
        ["Social networking", "Academic and professional task completion", "Gaming", "Entertainment"],
        1,
        "DOER platform connects doers with academic and professional tasks.",
    ),
    (
        "What should you do if you cannot meet a deadline?",
        ["Ignore it", "Submit incomplete work", "Inform your supervisor immediately", "Delete the project"],
        2,
        "Always communicate with your supervisor about deadline issues.",
    ),
    (
        "What is the minimum quality standard for submitted work?",
        ["No specific standard", "Original, plagiarism-free content", "Copy-paste from internet", "Only grammar matters"],
        1,
        "All work must be original and plagiarism-free.",
    ),
    (
        "How do you receive payments for completed projects?",
        ["Cash on delivery", "Through your linked bank account", "Gift cards", "Cryptocurrency only"],
        1,
        "Payments are transferred to your linked bank account.",
    ),
    (
        "What should you do if you find a bug in the platform?",
        ["Exploit it for personal gain", "Report it to support", "Share it on social media", "Ignore it"],
        1,
        "Always report bugs to our support team.",
    ),
    (
        "What indicates an urgent project?",
        ["Red badge or urgent label", "Higher word count", "Lower payment", "Multiple attachments"],
        0,
        "Urgent projects are marked with a red badge or urgent label.",
    ),
    (
        "What happens if you miss a deadline?",
        ["Nothing", "It may affect your rating and future projects", "You get a bonus", "Project is auto-completed"],
        1,
        "Missing deadlines can affect your rating and future project assignments.",
    ),
    (
        "How should you handle confidential project information?",
        ["Share it with friends", "Keep it strictly confidential", "Post it on social media", "Use it for other projects"],
        1,
        "All project information must be kept strictly confidential.",
    ),
    (
        "What is the best way to improve your rating?",
        ["Accept many projects and cancel some", "Deliver quality work on time", "Only accept low-paying projects", "Avoid difficult projects"],
        1,
        "Consistently delivering quality work on time is the best way to improve your rating.",
    ),
    (
        "What citation styles should you be familiar with?",
        ["Only APA", "Only MLA", "APA, MLA, Harvard, and others", "No citation is needed"],
        2,
        "Different projects may require different citation styles like APA, MLA, Harvard, etc.",
    ),
]


async def seed_activation_content():
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(TrainingModule.title))
        existing_titles = set(result.scalars().all())
        added_modules = 0
        for data in TRAINING_MODULES:
            if data["title"] in existing_titles:
                continue
            session.add(TrainingModule(**data))
            added_modules += 1

        result = await session.execute(select(QuizQuestion.question_text))
        existing_questions = set(result.scalars().all())
        added_questions = 0
        for order, (text, options, correct, explanation) in enumerate(QUIZ_QUESTIONS, 1):
            if text in existing_questions:
                continue
            session.add(
                QuizQuestion(
                    question_text=text,
                    options=options,
                    correct_option_index=correct,
                    explanation=explanation,
                    order_index=order,
                )
            )
            added_questions += 1

        await session.commit()
        print(f"  Seeded {added_modules} training modules, {added_questions} quiz questions")


if __name__ == "__main__":
    asyncio.run(seed_activation_content())
