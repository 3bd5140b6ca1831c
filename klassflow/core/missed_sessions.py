# klassflow/core/missed_sessions.py
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from klassflow.core.clock import utcnow
from klassflow.core.signature_service import BACKFILL_TTL, REQUEST_TTL, TokenLifecycle
from klassflow.crud import class_session as crud_session
from klassflow.crud import classroom as crud_classroom
from klassflow.db.models.class_session import ClassSession

logger = logging.getLogger(__name__)

MAX_MISSED_SESSIONS = 5


@dataclass
class MissedSession:
    session: ClassSession
    token: str

    @property
    def classroom_name(self) -> str:
        return self.session.classroom.name


class MissedSessionResolver:
    """
    Finds the past sessions a subject never resolved and hands out a
    short-lived backfill token for each, so they can be signed after the fact.

    Recomputed on every call; nothing is cached between requests.
    """

    def __init__(self, db: Session, lifecycle: TokenLifecycle | None = None):
        self.db = db
        self.lifecycle = lifecycle or TokenLifecycle(db)

    def find_missed_sessions(
        self,
        student_id: int,
        current_session_id: int,
        current_classroom_id: int | None,
        now: datetime | None = None,
    ) -> list[MissedSession]:
        now = now or utcnow()

        classroom_ids = crud_classroom.get_enrolled_classroom_ids(self.db, student_id)
        # The current classroom counts even without an enrollment (guests, shared devices)
        if current_classroom_id is not None and current_classroom_id not in classroom_ids:
            classroom_ids.append(current_classroom_id)

        sessions = crud_session.get_pending_sessions(
            self.db,
            student_id=student_id,
            classroom_ids=classroom_ids,
            exclude_session_id=current_session_id,
            now=now,
            limit=MAX_MISSED_SESSIONS,
        )
        if sessions:
            logger.info("Found %d missed sessions for student_id=%s", len(sessions), student_id)

        return [
            MissedSession(
                session=session,
                token=self.lifecycle.resolve_backfill_token(session.id, student_id, BACKFILL_TTL, now=now).token,
            )
            for session in sessions
        ]

    def find_missed_teacher_sessions(
        self,
        teacher_id: int,
        current_session_id: int,
        now: datetime | None = None,
    ) -> list[MissedSession]:
        """Past sessions taught by the teacher that still lack the teacher's signature."""
        now = now or utcnow()
        sessions = crud_session.get_unsigned_teacher_sessions(
            self.db,
            teacher_id=teacher_id,
            exclude_session_id=current_session_id,
            now=now,
            limit=MAX_MISSED_SESSIONS,
        )
        return [
            MissedSession(
                session=session,
                token=self.lifecycle.resolve_backfill_token(session.id, teacher_id, REQUEST_TTL, now=now).token,
            )
            for session in sessions
        ]
