"""Syllabus construction and read-only views over chapters and topics."""
import json
from dataclasses import replace
from pathlib import Path
from typing import Optional

from study_planner.models import Chapter, Topic

CONTENT_DIR = Path(__file__).parent / "content"


def load_raw_syllabus() -> dict:
    """Class level -> subject -> ordered topic titles, from syllabus.json."""
    data = json.loads((CONTENT_DIR / "syllabus.json").read_text(encoding="utf-8"))
    return data["classes"]


def available_classes() -> list[str]:
    return list(load_raw_syllabus())


def available_subjects(class_level: str) -> list[str]:
    return list(load_raw_syllabus().get(class_level, {}))


def build_syllabus(class_level: str, subjects, raw: Optional[dict] = None) -> tuple[Chapter, ...]:
    """Build one chapter per selected subject with only the first topic unlocked.

    Subjects unknown for the class still get a chapter, with no topics.
    """
    if raw is None:
        raw = load_raw_syllabus()
    titles_by_subject = raw.get(class_level, {})
    chapters = []
    for subject in subjects:
        topics = tuple(
            Topic(id=f"topic-{subject}-{i}", title=title, is_unlocked=(i == 0))
            for i, title in enumerate(titles_by_subject.get(subject, []))
        )
        chapters.append(Chapter(
            id=f"ch-{class_level}-{subject}",
            subject=subject,
            title=f"{subject} Foundation",
            topics=topics,
        ))
    return tuple(chapters)


def pending_syllabus(syllabus) -> tuple[Chapter, ...]:
    """Drop topics already marked completed."""
    return tuple(
        replace(ch, topics=tuple(t for t in ch.topics if not t.is_completed))
        for ch in syllabus
    )


def prune_titles(syllabus, done: dict[str, set]) -> tuple[Chapter, ...]:
    """Drop topics whose title is in ``done[chapter.subject]``."""
    return tuple(
        replace(ch, topics=tuple(t for t in ch.topics if t.title not in done.get(ch.subject, set())))
        for ch in syllabus
    )


def find_topic(syllabus, subject: str, title: str) -> Optional[Topic]:
    for ch in syllabus:
        if ch.subject != subject:
            continue
        for topic in ch.topics:
            if topic.title == title:
                return topic
    return None


def current_topic(chapter: Chapter) -> Optional[Topic]:
    """First unlocked topic not yet completed, else the chapter's first topic."""
    for topic in chapter.topics:
        if topic.is_unlocked and not topic.is_completed:
            return topic
    return chapter.topics[0] if chapter.topics else None


def count_topics(syllabus) -> tuple[int, int]:
    """Return (completed, total) topic counts."""
    total = sum(len(ch.topics) for ch in syllabus)
    completed = sum(1 for ch in syllabus for t in ch.topics if t.is_completed)
    return completed, total
