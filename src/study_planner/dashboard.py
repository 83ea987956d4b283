"""Dashboard scoring and statistics over a learner snapshot."""
from datetime import date, datetime, timedelta

from study_planner.models import Snapshot
from study_planner.quizzes import percentage
from study_planner.scheduler import parse_exam_date
from study_planner.syllabus import count_topics, current_topic

URGENT_DAYS = 30


def get_readiness_label(score: float) -> str:
    if score >= 80:
        return "READY"
    elif score >= 65:
        return "LIKELY"
    elif score >= 50:
        return "NEEDS WORK"
    return "NOT READY"


def get_readiness_color(score: float) -> str:
    if score >= 80:
        return "green"
    elif score >= 65:
        return "yellow"
    elif score >= 50:
        return "dark_orange"
    return "red"


def syllabus_progress(syllabus) -> dict:
    completed, total = count_topics(syllabus)
    return {
        "completed": completed,
        "total": total,
        "percent": round(completed / total * 100) if total else 0,
    }


def chapter_progress(chapter) -> dict:
    """Completion percent and the topic to practise next for one chapter."""
    done = sum(1 for t in chapter.topics if t.is_completed)
    total = len(chapter.topics)
    target = current_topic(chapter)
    return {
        "subject": chapter.subject,
        "title": chapter.title,
        "percent": round(done / total * 100) if total else 0,
        "current_topic": target.title if target else None,
    }


def exam_countdown(exam_date, today: date) -> dict | None:
    exam = parse_exam_date(exam_date)
    if exam is None:
        return None
    diff = (exam - today).days
    return {
        "days": max(diff, 0),
        "is_expired": diff < 0,
        "is_today": diff == 0,
        "is_urgent": 0 < diff <= URGENT_DAYS,
    }


def _day_of(timestamp: str) -> str:
    return str(timestamp).split("T")[0]


def _intensity(count: int) -> int:
    if count == 0:
        return 0
    if count == 1:
        return 1
    return 2 if count <= 3 else 3


def activity_heatmap(snapshot: Snapshot, today: date, days: int = 7) -> list[dict]:
    """Quizzes plus doubts per day for the last ``days`` days, oldest first."""
    heat = []
    for offset in range(days - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        count = sum(1 for q in snapshot.quiz_history if _day_of(q.date) == day)
        count += sum(1 for d in snapshot.doubts if _day_of(d.timestamp) == day)
        heat.append({
            "date": day,
            "day": datetime.fromisoformat(day).strftime("%a"),
            "count": count,
            "intensity": _intensity(count),
        })
    return heat


def todays_sessions(sessions, today: date) -> list:
    return [s for s in sessions if s.date == today]


def get_study_stats(snapshot: Snapshot) -> dict:
    history = snapshot.quiz_history
    avg = sum(percentage(r) for r in history) / len(history) if history else 0.0
    return {
        "sessions_completed": sum(1 for s in snapshot.sessions if s.is_completed),
        "sessions_planned": sum(1 for s in snapshot.sessions if not s.is_completed),
        "quizzes_taken": len(history),
        "avg_quiz_score": round(avg, 1),
        "doubts_solved": len(snapshot.doubts),
        "notes_saved": len(snapshot.notes),
        "streak": snapshot.profile.streak,
    }
