from datetime import date

import pytest

from study_planner.models import Chapter, Profile, Topic

TODAY = date(2025, 1, 6)


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_planner.db")
    return db_path


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def profile():
    return Profile(
        uid="u1", name="Asha", class_level="10", subjects=("Mathematics", "Science"),
        exam_date="2025-03-01", daily_study_hours=2, onboarded=True,
    )


def make_chapter(subject, titles, completed=0):
    """Chapter whose first ``completed`` topics are done and the next one unlocked."""
    topics = tuple(
        Topic(id=f"{subject[:3].lower()}-{i}", title=t, is_completed=i < completed, is_unlocked=i <= completed)
        for i, t in enumerate(titles)
    )
    return Chapter(id=f"ch-{subject}", subject=subject, title=f"{subject} Foundation", topics=topics)
