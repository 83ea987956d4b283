"""Topic completion and unlocking driven by quiz results."""
import logging
from dataclasses import replace

from study_planner.models import QuizResult

logger = logging.getLogger(__name__)

PASS_THRESHOLD = 0.5


def is_passing(score: int, total: int) -> bool:
    if total <= 0:
        return False
    return score / total >= PASS_THRESHOLD


def apply_quiz_result(syllabus, result: QuizResult) -> tuple:
    """Return the syllabus with one quiz result applied.

    A pass completes the topic and unlocks only its immediate successor. A fail
    never reverts completion. The latest score is recorded either way. A result
    naming a subject or topic not in the syllabus leaves it unchanged.
    """
    passed = is_passing(result.score, result.total)
    matched = False
    chapters = []
    for chapter in syllabus:
        idx = _topic_index(chapter, result) if chapter.subject == result.subject else -1
        if idx == -1:
            chapters.append(chapter)
            continue
        matched = True
        topics = list(chapter.topics)
        topic = topics[idx]
        topics[idx] = replace(
            topic,
            is_completed=True if passed else topic.is_completed,
            quiz_score=result.score,
        )
        if passed and idx < len(topics) - 1:
            topics[idx + 1] = replace(topics[idx + 1], is_unlocked=True)
        chapters.append(replace(chapter, topics=tuple(topics)))

    if not matched:
        logger.warning(
            "Quiz result %s references %s / %r, not in syllabus; ignored",
            result.id, result.subject, result.topic_title,
        )
        return tuple(syllabus)
    logger.debug(
        "Applied quiz %s to %s / %r: %d/%d (%s)",
        result.id, result.subject, result.topic_title, result.score, result.total,
        "pass" if passed else "fail",
    )
    return tuple(chapters)


def _topic_index(chapter, result) -> int:
    for i, topic in enumerate(chapter.topics):
        if topic.title == result.topic_title:
            return i
    return -1
