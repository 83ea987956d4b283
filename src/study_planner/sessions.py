"""Add, edit, delete and toggle study sessions by id."""
import uuid
from dataclasses import replace

from study_planner.models import COMPLETED, PLANNED, StudySession

CUSTOM_PREFIX = "custom-"
GENERATED_PREFIX = "gen-"


def new_custom_session_id() -> str:
    return f"{CUSTOM_PREFIX}{uuid.uuid4().hex[:12]}"


def is_custom(session: StudySession) -> bool:
    return session.id.startswith(CUSTOM_PREFIX)


def add_session(sessions, session: StudySession) -> tuple[StudySession, ...]:
    """Append a session; an id already present leaves the list as is."""
    if any(s.id == session.id for s in sessions):
        return tuple(sessions)
    return tuple(sessions) + (session,)


def update_session(sessions, session: StudySession) -> tuple[StudySession, ...]:
    return tuple(session if s.id == session.id else s for s in sessions)


def delete_session(sessions, session_id: str) -> tuple[StudySession, ...]:
    return tuple(s for s in sessions if s.id != session_id)


def toggle_status(sessions, session_id: str) -> tuple[StudySession, ...]:
    """Flip completed <-> planned for one session."""
    return tuple(
        replace(s, status=PLANNED if s.status == COMPLETED else COMPLETED) if s.id == session_id else s
        for s in sessions
    )


def get_session(sessions, session_id: str):
    for s in sessions:
        if s.id == session_id:
            return s
    return None
