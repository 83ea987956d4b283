"""Quiz content: the question-generation hook, a bundled question bank, grading."""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from study_planner.models import QuizQuestion, QuizResult

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"

# (subject, topic, count) -> questions. Any question service plugs in here.
QuizGenerator = Callable[[str, str, int], list[QuizQuestion]]


def load_question_bank(path: Optional[Path] = None) -> list[dict]:
    path = path or CONTENT_DIR / "questions.json"
    return json.loads(Path(path).read_text(encoding="utf-8"))["questions"]


def bank_quiz_generator(bank: Optional[list[dict]] = None) -> QuizGenerator:
    """Build a generator that serves questions from a static bank, in bank order."""
    entries = load_question_bank() if bank is None else bank

    def generate(subject: str, topic: str, count: int) -> list[QuizQuestion]:
        matches = [q for q in entries if q["subject"] == subject and q["topic"] == topic]
        logger.debug("Question bank has %d question(s) for %s / %r", len(matches), subject, topic)
        return [
            QuizQuestion(
                question=q["question"],
                options=tuple(q["options"]),
                correct_answer=q["correct_answer"],
                explanation=q.get("explanation", ""),
            )
            for q in matches[:count]
        ]

    return generate


def grade_quiz(questions, user_answers) -> int:
    """Count answers that exactly match the correct option."""
    return sum(1 for q, a in zip(questions, user_answers) if a == q.correct_answer)


def build_quiz_result(
    result_id: str,
    user_id: str,
    subject: str,
    topic_title: str,
    questions,
    user_answers,
    taken_at: Optional[datetime] = None,
) -> QuizResult:
    taken_at = taken_at or datetime.now()
    questions = tuple(questions)
    return QuizResult(
        id=result_id,
        user_id=user_id,
        date=taken_at.isoformat(),
        subject=subject,
        topic_title=topic_title,
        score=grade_quiz(questions, user_answers),
        total=len(questions),
        questions=questions,
        user_answers=tuple(user_answers),
    )


def percentage(result: QuizResult) -> int:
    if result.total <= 0:
        return 0
    return round(result.score / result.total * 100)
