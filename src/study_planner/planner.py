"""Plan recalculation and snapshot-level operations the host calls."""
import logging
from dataclasses import replace
from datetime import date

from study_planner.models import Profile, QuizResult, Snapshot
from study_planner.progression import apply_quiz_result
from study_planner.scheduler import DEFAULT_SESSION_MINUTES, generate_schedule
from study_planner.syllabus import pending_syllabus, prune_titles

logger = logging.getLogger(__name__)


def completed_titles(sessions) -> dict[str, set]:
    """Topic titles with a completed session, keyed by subject."""
    done: dict[str, set] = {}
    for s in sessions:
        if s.is_completed:
            done.setdefault(s.subject, set()).add(s.topic_title)
    return done


def recalculate(
    profile,
    syllabus,
    sessions,
    today: date,
    session_minutes: int = DEFAULT_SESSION_MINUTES,
) -> tuple:
    """Keep completed sessions verbatim and reschedule everything else.

    Topics are pruned by title within their own subject, so equal titles in
    different subjects are not merged. Fresh session ids never repeat a kept one.
    """
    completed = tuple(s for s in sessions if s.is_completed)
    remaining = prune_titles(syllabus, completed_titles(completed))
    fresh = generate_schedule(
        profile, remaining, today,
        session_minutes=session_minutes, taken_ids={s.id for s in completed},
    )
    logger.info(
        "Recalculated plan: kept %d completed, dropped %d, generated %d",
        len(completed), len(sessions) - len(completed), len(fresh),
    )
    return completed + fresh


def complete_onboarding(
    profile: Profile,
    syllabus,
    today: date,
    session_minutes: int = DEFAULT_SESSION_MINUTES,
) -> Snapshot:
    """Mark the profile onboarded and generate the first plan."""
    profile = replace(profile, onboarded=True)
    syllabus = tuple(syllabus)
    sessions = generate_schedule(profile, pending_syllabus(syllabus), today, session_minutes=session_minutes)
    return Snapshot(profile=profile, syllabus=syllabus, sessions=sessions)


def record_quiz_result(snapshot: Snapshot, result: QuizResult) -> Snapshot:
    """Prepend the result to history and apply it to the syllabus."""
    return replace(
        snapshot,
        quiz_history=(result,) + snapshot.quiz_history,
        syllabus=apply_quiz_result(snapshot.syllabus, result),
    )


def recalculate_plan(
    snapshot: Snapshot,
    today: date,
    session_minutes: int = DEFAULT_SESSION_MINUTES,
) -> Snapshot:
    sessions = recalculate(
        snapshot.profile, snapshot.syllabus, snapshot.sessions, today, session_minutes=session_minutes,
    )
    return replace(snapshot, sessions=sessions)


def update_profile(
    snapshot: Snapshot,
    profile: Profile,
    today: date,
    session_minutes: int = DEFAULT_SESSION_MINUTES,
) -> Snapshot:
    """Store a new profile; a changed study budget or exam date replans."""
    old = snapshot.profile
    snapshot = replace(snapshot, profile=profile)
    if (old.daily_study_hours, old.exam_date) != (profile.daily_study_hours, profile.exam_date):
        logger.info(
            "Profile pacing changed (%sh -> %sh, exam %s -> %s)",
            old.daily_study_hours, profile.daily_study_hours, old.exam_date, profile.exam_date,
        )
        snapshot = recalculate_plan(snapshot, today, session_minutes=session_minutes)
    return snapshot


def add_doubt(snapshot: Snapshot, doubt) -> Snapshot:
    """Host hook for the doubt-solving service: prepend an answered doubt."""
    return replace(snapshot, doubts=(doubt,) + snapshot.doubts)


def add_note(snapshot: Snapshot, note) -> Snapshot:
    """Host hook for the note-synthesis service: prepend a saved note."""
    return replace(snapshot, notes=(note,) + snapshot.notes)


def delete_note(snapshot: Snapshot, note_id: str) -> Snapshot:
    """Host hook for the note-synthesis service: drop a note by id."""
    return replace(snapshot, notes=tuple(n for n in snapshot.notes if n.id != note_id))
