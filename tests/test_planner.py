# tests/test_planner.py
from dataclasses import replace
from datetime import date, timedelta

from study_planner.db import init_db
from study_planner.models import DoubtRecord, NoteRecord, QuizResult, StudySession
from study_planner.planner import (
    add_doubt, add_note, complete_onboarding, completed_titles, delete_note, recalculate,
    recalculate_plan, record_quiz_result, update_profile,
)
from study_planner.sessions import toggle_status, update_session
from study_planner.store import load, save
from conftest import make_chapter


def done(session_id, subject, title, day=date(2025, 1, 2)):
    return StudySession(
        id=session_id, date=day, subject=subject, topic_title=title,
        duration_minutes=45, status="completed",
    )


def planned(session_id, subject, title, day=date(2025, 1, 3)):
    return StudySession(
        id=session_id, date=day, subject=subject, topic_title=title, duration_minutes=45,
    )


def test_recalculate_keeps_completed_and_replans_rest(profile, today):
    syllabus = (make_chapter("Mathematics", ["t0", "t1", "t2"]),)
    sessions = (
        done("gen-1", "Mathematics", "t0"),
        planned("gen-2", "Mathematics", "t1"),
        planned("gen-3", "Mathematics", "t2"),
    )
    result = recalculate(profile, syllabus, sessions, today)
    assert result[0] == sessions[0]
    pending = result[1:]
    assert [s.topic_title for s in pending] == ["t1", "t2"]
    assert len({s.topic_title for s in pending}) == len(pending)
    assert all(s.status == "planned" for s in pending)
    assert pending[0].date == today


def test_recalculate_preserves_completed_subset_exactly(profile, today):
    syllabus = (
        make_chapter("Mathematics", ["m0", "m1", "m2"]),
        make_chapter("Science", ["s0", "s1"]),
    )
    sessions = (
        done("gen-a", "Science", "s0", day=date(2024, 12, 30)),
        planned("gen-b", "Mathematics", "m0"),
        done("custom-x", "Mathematics", "m1", day=date(2025, 1, 1)),
        planned("custom-y", "English", "Revision"),
    )
    result = recalculate(profile, syllabus, sessions, today)
    assert [s for s in result if s.status == "completed"] == [sessions[0], sessions[2]]
    assert sorted(s.topic_title for s in result if s.status == "planned") == ["m0", "m2", "s1"]
    assert all(s.id != "custom-y" for s in result)


def test_recalculate_does_not_merge_titles_across_subjects(profile, today):
    syllabus = (
        make_chapter("Mathematics", ["Probability"]),
        make_chapter("Science", ["Probability"]),
    )
    sessions = (done("gen-1", "Mathematics", "Probability"),)
    result = recalculate(profile, syllabus, sessions, today)
    fresh = result[1:]
    assert [(s.subject, s.topic_title) for s in fresh] == [("Science", "Probability")]


def test_recalculate_with_nothing_done(profile, today):
    syllabus = (make_chapter("Mathematics", ["t0"]),)
    result = recalculate(profile, syllabus, (), today)
    assert [s.topic_title for s in result] == ["t0"]


def test_recalculate_all_done_leaves_only_history(profile, today):
    syllabus = (make_chapter("Mathematics", ["t0"]),)
    sessions = (done("gen-1", "Mathematics", "t0"),)
    assert recalculate(profile, syllabus, sessions, today) == sessions


def test_completed_titles_by_subject():
    sessions = (
        done("a", "Mathematics", "t0"),
        planned("b", "Mathematics", "t1"),
        done("c", "Science", "t0"),
    )
    assert completed_titles(sessions) == {"Mathematics": {"t0"}, "Science": {"t0"}}


def test_complete_onboarding_schedules_pending_topics(profile, today):
    syllabus = (make_chapter("Mathematics", ["t0", "t1", "t2"], completed=1),)
    snapshot = complete_onboarding(replace(profile, onboarded=False), syllabus, today)
    assert snapshot.profile.onboarded is True
    assert snapshot.syllabus == syllabus
    assert [s.topic_title for s in snapshot.sessions] == ["t1", "t2"]


def test_record_quiz_result_updates_history_and_syllabus(profile, today):
    snapshot = complete_onboarding(profile, (make_chapter("Mathematics", ["t0", "t1"]),), today)
    result = QuizResult(
        id="q1", user_id="u1", date="2025-01-06T09:00:00", subject="Mathematics",
        topic_title="t0", score=3, total=5,
    )
    updated = record_quiz_result(snapshot, result)
    assert updated.quiz_history == (result,)
    assert updated.syllabus[0].topics[0].is_completed is True
    assert updated.syllabus[0].topics[1].is_unlocked is True
    assert updated.sessions == snapshot.sessions


def test_update_profile_hours_change_replans(profile, today):
    syllabus = (make_chapter("Mathematics", [f"t{i}" for i in range(4)]),)
    snapshot = complete_onboarding(profile, syllabus, today)
    assert snapshot.sessions[-1].date == today + timedelta(days=1)
    faster = update_profile(snapshot, replace(snapshot.profile, daily_study_hours=4), today)
    assert faster.profile.daily_study_hours == 4
    assert {s.date for s in faster.sessions} == {today}


def test_update_profile_without_pacing_change_keeps_sessions(profile, today):
    snapshot = complete_onboarding(profile, (make_chapter("Mathematics", ["t0"]),), today)
    renamed = update_profile(snapshot, replace(snapshot.profile, name="Ravi"), today + timedelta(days=3))
    assert renamed.profile.name == "Ravi"
    assert renamed.sessions == snapshot.sessions


def test_recalculate_plan_uses_today(profile, today):
    snapshot = complete_onboarding(profile, (make_chapter("Mathematics", ["t0"]),), today)
    later = today + timedelta(days=5)
    assert recalculate_plan(snapshot, later).sessions[0].date == later


def test_history_helpers(profile, today):
    snapshot = complete_onboarding(profile, (), today)
    doubt = DoubtRecord(id="d1", user_id="u1", subject="Science", question="Why?", answer="Because.",
                        timestamp="2025-01-06T08:00:00")
    note = NoteRecord(id="n1", user_id="u1", subject="Science", topic_title="Electricity",
                      content="V = IR", created_at="2025-01-06T08:00:00")
    snapshot = add_note(add_doubt(snapshot, doubt), note)
    assert snapshot.doubts == (doubt,)
    assert snapshot.notes == (note,)
    assert delete_note(snapshot, "n1").notes == ()
    assert delete_note(snapshot, "missing").notes == (note,)


def test_recalculate_after_editing_and_completing_keeps_ids_unique(tmp_db, profile, today):
    init_db(tmp_db)
    snapshot = complete_onboarding(profile, (make_chapter("Mathematics", ["t0", "t1"]),), today)
    first = snapshot.sessions[0]
    sessions = update_session(snapshot.sessions, replace(first, topic_title="t0 revision"))
    snapshot = replace(snapshot, sessions=toggle_status(sessions, first.id))

    snapshot = recalculate_plan(snapshot, today)

    ids = [s.id for s in snapshot.sessions]
    assert len(set(ids)) == len(ids)
    assert snapshot.sessions[0].id == first.id
    assert snapshot.sessions[0].topic_title == "t0 revision"
    assert [s.topic_title for s in snapshot.sessions[1:]] == ["t0", "t1"]
    save(tmp_db, snapshot)
    assert load(tmp_db, profile.uid) == snapshot
