"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

DEFAULT_DB_PATH = str(Path.home() / ".study_planner" / "planner.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS profiles (
    uid TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    class_level TEXT NOT NULL,
    subjects TEXT NOT NULL DEFAULT '[]',  -- JSON
    exam_date TEXT,
    daily_study_hours INTEGER NOT NULL DEFAULT 3,
    streak INTEGER NOT NULL DEFAULT 0,
    onboarded INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS chapters (
    uid TEXT NOT NULL REFERENCES profiles(uid),
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    subject TEXT NOT NULL,
    title TEXT NOT NULL,
    PRIMARY KEY (uid, id)
);

CREATE TABLE IF NOT EXISTS topics (
    uid TEXT NOT NULL REFERENCES profiles(uid),
    chapter_id TEXT NOT NULL,
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    title TEXT NOT NULL,
    is_completed INTEGER NOT NULL DEFAULT 0,
    is_unlocked INTEGER NOT NULL DEFAULT 0,
    quiz_score INTEGER,
    PRIMARY KEY (uid, chapter_id, id)
);

CREATE TABLE IF NOT EXISTS study_sessions (
    uid TEXT NOT NULL REFERENCES profiles(uid),
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    date TEXT NOT NULL,
    subject TEXT NOT NULL,
    topic_title TEXT NOT NULL,
    duration_minutes INTEGER NOT NULL,
    status TEXT NOT NULL DEFAULT 'planned',
    PRIMARY KEY (uid, id)
);

CREATE TABLE IF NOT EXISTS quiz_results (
    uid TEXT NOT NULL REFERENCES profiles(uid),
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    taken_at TEXT NOT NULL,
    subject TEXT NOT NULL,
    topic_title TEXT NOT NULL,
    score INTEGER NOT NULL,
    total INTEGER NOT NULL,
    questions TEXT NOT NULL DEFAULT '[]',  -- JSON
    user_answers TEXT NOT NULL DEFAULT '[]',  -- JSON
    PRIMARY KEY (uid, id)
);

CREATE TABLE IF NOT EXISTS doubts (
    uid TEXT NOT NULL REFERENCES profiles(uid),
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    subject TEXT NOT NULL,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    PRIMARY KEY (uid, id)
);

CREATE TABLE IF NOT EXISTS notes (
    uid TEXT NOT NULL REFERENCES profiles(uid),
    id TEXT NOT NULL,
    position INTEGER NOT NULL,
    subject TEXT NOT NULL,
    topic_title TEXT NOT NULL,
    content TEXT NOT NULL,
    created_at TEXT NOT NULL,
    PRIMARY KEY (uid, id)
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
