"""Calendar scheduling of pending syllabus topics under a daily time budget."""
import logging
from datetime import date, timedelta
from typing import Optional

from study_planner.models import PLANNED, StudySession, Topic

logger = logging.getLogger(__name__)

DEFAULT_SESSION_MINUTES = 45
DEFAULT_HORIZON_DAYS = 30
MIN_DAILY_HOURS = 1


def parse_exam_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def daily_budget_minutes(hours) -> int:
    """Minutes available per day; non-positive or junk hours become MIN_DAILY_HOURS."""
    try:
        minutes = round(float(hours) * 60)
    except (TypeError, ValueError):
        minutes = 0
    if minutes <= 0:
        logger.warning("Daily study hours %r not usable, using %d hour(s)", hours, MIN_DAILY_HOURS)
        return MIN_DAILY_HOURS * 60
    return minutes


def horizon_days(exam_date, today: date) -> int:
    """Days between today and the exam, or DEFAULT_HORIZON_DAYS without a usable future date."""
    exam = parse_exam_date(exam_date)
    if exam is None or exam < today:
        logger.warning("Exam date %r missing or past, using %d-day horizon", exam_date, DEFAULT_HORIZON_DAYS)
        return DEFAULT_HORIZON_DAYS
    return max(1, (exam - today).days)


def interleave_topics(syllabus) -> list[tuple[str, Topic]]:
    """Flatten chapters into (subject, topic) pairs, taking one topic per subject in turn.

    Subjects keep the order their first chapter appears in; each subject's topics
    keep chapter order, then topic order.
    """
    queues: dict[str, list[Topic]] = {}
    for chapter in syllabus:
        queues.setdefault(chapter.subject, []).extend(chapter.topics)

    ordered = []
    depth = 0
    while True:
        row = [(subject, topics[depth]) for subject, topics in queues.items() if depth < len(topics)]
        if not row:
            break
        ordered.extend(row)
        depth += 1
    return ordered


def generate_schedule(
    profile,
    syllabus,
    today: date,
    session_minutes: int = DEFAULT_SESSION_MINUTES,
    taken_ids=(),
) -> tuple[StudySession, ...]:
    """Lay pending topics out on consecutive days starting today.

    Args:
        profile: Learner profile; only daily_study_hours and exam_date are read.
        syllabus: Chapters holding only the topics still to schedule.
        today: First calendar day of the plan.
        session_minutes: Length of one topic session before clipping.
        taken_ids: Ids already held by sessions kept beside this plan; a
            generated id that collides gets a numeric suffix.

    Returns:
        Sessions ordered by date, then by round-robin subject order.
    """
    work = interleave_topics(syllabus)
    if not work:
        return ()

    budget = daily_budget_minutes(profile.daily_study_hours)
    length = max(1, min(int(session_minutes), budget))
    horizon = horizon_days(profile.exam_date, today)

    used_ids = set(taken_ids)
    sessions = []
    day = today
    used = 0
    for subject, topic in work:
        if used + length > budget:
            day += timedelta(days=1)
            used = 0
        base_id = session_id = f"gen-{day.isoformat()}-{topic.id}"
        suffix = 2
        while session_id in used_ids:
            session_id = f"{base_id}-{suffix}"
            suffix += 1
        used_ids.add(session_id)
        sessions.append(StudySession(
            id=session_id,
            date=day,
            subject=subject,
            topic_title=topic.title,
            duration_minutes=length,
            status=PLANNED,
        ))
        used += length

    last_day = today + timedelta(days=horizon)
    if sessions[-1].date > last_day:
        logger.warning(
            "Plan runs %d day(s) past %s at %d min/day",
            (sessions[-1].date - last_day).days, last_day.isoformat(), budget,
        )
    logger.debug("Scheduled %d sessions from %s to %s", len(sessions), today, sessions[-1].date)
    return tuple(sessions)
