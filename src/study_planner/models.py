"""Data classes for the study planner domain model."""
from dataclasses import dataclass
from datetime import date
from typing import Optional

PLANNED = "planned"
COMPLETED = "completed"


@dataclass(frozen=True)
class Topic:
    id: str
    title: str
    is_completed: bool = False
    is_unlocked: bool = False
    quiz_score: Optional[int] = None


@dataclass(frozen=True)
class Chapter:
    id: str
    subject: str
    title: str
    topics: tuple[Topic, ...] = ()


@dataclass(frozen=True)
class Profile:
    uid: str
    name: str
    class_level: str = "10"
    subjects: tuple[str, ...] = ()
    exam_date: Optional[str] = None  # ISO date
    daily_study_hours: int = 3
    streak: int = 0
    onboarded: bool = False


@dataclass(frozen=True)
class StudySession:
    id: str
    date: date
    subject: str
    topic_title: str
    duration_minutes: int
    status: str = PLANNED

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED


@dataclass(frozen=True)
class QuizQuestion:
    question: str
    options: tuple[str, ...]
    correct_answer: str
    explanation: str = ""


@dataclass(frozen=True)
class QuizResult:
    id: str
    user_id: str
    date: str  # ISO timestamp
    subject: str
    topic_title: str
    score: int
    total: int
    questions: tuple[QuizQuestion, ...] = ()
    user_answers: tuple[str, ...] = ()


@dataclass(frozen=True)
class DoubtRecord:
    id: str
    user_id: str
    subject: str
    question: str
    answer: str
    timestamp: str


@dataclass(frozen=True)
class NoteRecord:
    id: str
    user_id: str
    subject: str
    topic_title: str
    content: str
    created_at: str


@dataclass(frozen=True)
class Snapshot:
    """Everything the host keeps for one learner."""
    profile: Profile
    syllabus: tuple[Chapter, ...] = ()
    sessions: tuple[StudySession, ...] = ()
    quiz_history: tuple[QuizResult, ...] = ()
    doubts: tuple[DoubtRecord, ...] = ()
    notes: tuple[NoteRecord, ...] = ()
