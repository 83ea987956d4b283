# tests/test_integration.py
"""End-to-end test of the core workflow."""
from dataclasses import replace
from datetime import timedelta

from study_planner.dashboard import get_study_stats, syllabus_progress
from study_planner.db import init_db
from study_planner.models import Profile
from study_planner.planner import complete_onboarding, recalculate_plan, record_quiz_result, update_profile
from study_planner.quizzes import bank_quiz_generator, build_quiz_result
from study_planner.sessions import toggle_status
from study_planner.store import load, save
from study_planner.syllabus import build_syllabus


def test_onboard_quiz_and_replan(tmp_db, today):
    init_db(tmp_db)
    profile = Profile(uid="u1", name="Asha", class_level="10", subjects=("Mathematics", "Science"),
                      exam_date=(today + timedelta(days=60)).isoformat(), daily_study_hours=2)

    # Onboarding
    snapshot = complete_onboarding(profile, build_syllabus("10", profile.subjects), today)
    save(tmp_db, snapshot)
    first = snapshot.sessions[0]
    assert (first.subject, first.topic_title) == ("Mathematics", "Real Numbers")
    assert snapshot.sessions[1].subject == "Science"
    total_topics = syllabus_progress(snapshot.syllabus)["total"]
    assert len(snapshot.sessions) == total_topics

    # Study the first session and pass its quiz
    snapshot = replace(snapshot, sessions=toggle_status(snapshot.sessions, first.id))
    questions = bank_quiz_generator()("Mathematics", "Real Numbers", 5)
    answers = [q.correct_answer for q in questions]
    snapshot = record_quiz_result(
        snapshot, build_quiz_result("r1", "u1", "Mathematics", "Real Numbers", questions, answers),
    )
    maths = snapshot.syllabus[0]
    assert maths.topics[0].is_completed is True
    assert maths.topics[1].is_unlocked is True
    save(tmp_db, snapshot)

    # Next day, more time per day
    tomorrow = today + timedelta(days=1)
    snapshot = load(tmp_db, "u1")
    snapshot = update_profile(snapshot, replace(snapshot.profile, daily_study_hours=3), tomorrow)
    completed = [s for s in snapshot.sessions if s.status == "completed"]
    pending = [s for s in snapshot.sessions if s.status == "planned"]
    assert completed == [replace(first, status="completed")]
    assert len(pending) == total_topics - 1
    assert all(s.date >= tomorrow for s in pending)
    assert sum(s.duration_minutes for s in pending if s.date == tomorrow) <= 180
    assert ("Mathematics", "Real Numbers") not in {(s.subject, s.topic_title) for s in pending}

    # Explicit recalculation on the same inputs is stable
    assert recalculate_plan(snapshot, tomorrow) == snapshot

    stats = get_study_stats(snapshot)
    assert stats["sessions_completed"] == 1
    assert stats["quizzes_taken"] == 1
    assert stats["avg_quiz_score"] == 100.0
