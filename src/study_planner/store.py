"""Persist learner snapshots and user settings in SQLite."""
import json
import logging
from datetime import date

from study_planner.db import get_connection
from study_planner.models import (
    Chapter, DoubtRecord, NoteRecord, Profile, QuizQuestion, QuizResult,
    Snapshot, StudySession, Topic,
)

logger = logging.getLogger(__name__)

OWNED_TABLES = ("topics", "chapters", "study_sessions", "quiz_results", "doubts", "notes")


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def get_int_setting(db_path: str, key: str, default: int) -> int:
    value = get_setting(db_path, key)
    try:
        return int(value) if value is not None else default
    except ValueError:
        logger.warning("Setting %s=%r is not an integer, using %d", key, value, default)
        return default


def get_current_uid(db_path: str) -> str | None:
    return get_setting(db_path, "current_uid")


def set_current_uid(db_path: str, uid: str) -> None:
    set_setting(db_path, "current_uid", uid)


def save(db_path: str, snapshot: Snapshot) -> None:
    """Replace everything stored for the snapshot's learner in one transaction."""
    p = snapshot.profile
    conn = get_connection(db_path)
    try:
        with conn:
            conn.execute(
                """INSERT INTO profiles
                (uid, name, class_level, subjects, exam_date, daily_study_hours, streak, onboarded)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(uid) DO UPDATE SET name=excluded.name, class_level=excluded.class_level,
                subjects=excluded.subjects, exam_date=excluded.exam_date,
                daily_study_hours=excluded.daily_study_hours, streak=excluded.streak,
                onboarded=excluded.onboarded""",
                (p.uid, p.name, p.class_level, json.dumps(list(p.subjects)), p.exam_date,
                 p.daily_study_hours, p.streak, int(p.onboarded)),
            )
            for table in OWNED_TABLES:
                conn.execute(f"DELETE FROM {table} WHERE uid = ?", (p.uid,))
            for ch_pos, ch in enumerate(snapshot.syllabus):
                conn.execute(
                    "INSERT INTO chapters (uid, id, position, subject, title) VALUES (?, ?, ?, ?, ?)",
                    (p.uid, ch.id, ch_pos, ch.subject, ch.title),
                )
                conn.executemany(
                    """INSERT INTO topics
                    (uid, chapter_id, id, position, title, is_completed, is_unlocked, quiz_score)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                    [(p.uid, ch.id, t.id, pos, t.title, int(t.is_completed), int(t.is_unlocked), t.quiz_score)
                     for pos, t in enumerate(ch.topics)],
                )
            conn.executemany(
                """INSERT INTO study_sessions
                (uid, id, position, date, subject, topic_title, duration_minutes, status)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                [(p.uid, s.id, pos, s.date.isoformat(), s.subject, s.topic_title, s.duration_minutes, s.status)
                 for pos, s in enumerate(snapshot.sessions)],
            )
            conn.executemany(
                """INSERT INTO quiz_results
                (uid, id, position, taken_at, subject, topic_title, score, total, questions, user_answers)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                [(p.uid, r.id, pos, r.date, r.subject, r.topic_title, r.score, r.total,
                  json.dumps([_question_to_dict(q) for q in r.questions]), json.dumps(list(r.user_answers)))
                 for pos, r in enumerate(snapshot.quiz_history)],
            )
            conn.executemany(
                """INSERT INTO doubts (uid, id, position, subject, question, answer, timestamp)
                VALUES (?, ?, ?, ?, ?, ?, ?)""",
                [(p.uid, d.id, pos, d.subject, d.question, d.answer, d.timestamp)
                 for pos, d in enumerate(snapshot.doubts)],
            )
            conn.executemany(
                """INSERT INTO notes (uid, id, position, subject, topic_title, content, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)""",
                [(p.uid, n.id, pos, n.subject, n.topic_title, n.content, n.created_at)
                 for pos, n in enumerate(snapshot.notes)],
            )
    finally:
        conn.close()
    logger.debug("Saved snapshot for %s (%d sessions)", p.uid, len(snapshot.sessions))


def load(db_path: str, uid: str) -> Snapshot | None:
    """Rebuild a learner's snapshot, or None if the uid was never saved."""
    conn = get_connection(db_path)
    try:
        row = conn.execute("SELECT * FROM profiles WHERE uid = ?", (uid,)).fetchone()
        if row is None:
            return None
        profile = Profile(
            uid=row["uid"],
            name=row["name"],
            class_level=row["class_level"],
            subjects=tuple(json.loads(row["subjects"])),
            exam_date=row["exam_date"],
            daily_study_hours=row["daily_study_hours"],
            streak=row["streak"],
            onboarded=bool(row["onboarded"]),
        )
        chapters = []
        for ch in conn.execute("SELECT * FROM chapters WHERE uid = ? ORDER BY position", (uid,)).fetchall():
            topics = conn.execute(
                "SELECT * FROM topics WHERE uid = ? AND chapter_id = ? ORDER BY position", (uid, ch["id"]),
            ).fetchall()
            chapters.append(Chapter(
                id=ch["id"],
                subject=ch["subject"],
                title=ch["title"],
                topics=tuple(
                    Topic(
                        id=t["id"],
                        title=t["title"],
                        is_completed=bool(t["is_completed"]),
                        is_unlocked=bool(t["is_unlocked"]),
                        quiz_score=t["quiz_score"],
                    )
                    for t in topics
                ),
            ))
        sessions = tuple(
            StudySession(
                id=s["id"],
                date=date.fromisoformat(s["date"]),
                subject=s["subject"],
                topic_title=s["topic_title"],
                duration_minutes=s["duration_minutes"],
                status=s["status"],
            )
            for s in conn.execute("SELECT * FROM study_sessions WHERE uid = ? ORDER BY position", (uid,))
        )
        history = tuple(
            QuizResult(
                id=r["id"],
                user_id=uid,
                date=r["taken_at"],
                subject=r["subject"],
                topic_title=r["topic_title"],
                score=r["score"],
                total=r["total"],
                questions=tuple(_question_from_dict(q) for q in json.loads(r["questions"])),
                user_answers=tuple(json.loads(r["user_answers"])),
            )
            for r in conn.execute("SELECT * FROM quiz_results WHERE uid = ? ORDER BY position", (uid,))
        )
        doubts = tuple(
            DoubtRecord(id=d["id"], user_id=uid, subject=d["subject"], question=d["question"],
                        answer=d["answer"], timestamp=d["timestamp"])
            for d in conn.execute("SELECT * FROM doubts WHERE uid = ? ORDER BY position", (uid,))
        )
        notes = tuple(
            NoteRecord(id=n["id"], user_id=uid, subject=n["subject"], topic_title=n["topic_title"],
                       content=n["content"], created_at=n["created_at"])
            for n in conn.execute("SELECT * FROM notes WHERE uid = ? ORDER BY position", (uid,))
        )
    finally:
        conn.close()
    return Snapshot(
        profile=profile,
        syllabus=tuple(chapters),
        sessions=sessions,
        quiz_history=history,
        doubts=doubts,
        notes=notes,
    )


def _question_to_dict(q: QuizQuestion) -> dict:
    return {
        "question": q.question,
        "options": list(q.options),
        "correct_answer": q.correct_answer,
        "explanation": q.explanation,
    }


def _question_from_dict(d: dict) -> QuizQuestion:
    return QuizQuestion(
        question=d["question"],
        options=tuple(d["options"]),
        correct_answer=d["correct_answer"],
        explanation=d.get("explanation", ""),
    )
