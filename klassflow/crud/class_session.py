# klassflow/crud/class_session.py
from datetime import datetime

from sqlalchemy import and_
from sqlalchemy.orm import Session
from klassflow.db.models.class_session import ClassSession
from klassflow.db.models.attendance import Attendance

# Statuses that close a session for a subject; anything else is still pending
RESOLVED_STATUSES = ("PRESENT", "EXCUSED", "ABSENT")


def get_session(db: Session, session_id: int):
    return db.query(ClassSession).filter(ClassSession.id == session_id).first()


def get_pending_sessions(
    db: Session,
    student_id: int,
    classroom_ids: list[int],
    exclude_session_id: int,
    now: datetime,
    limit: int,
) -> list[ClassSession]:
    """Past sessions of the given classrooms with no resolved attendance for the student."""
    if not classroom_ids:
        return []
    return (
        db.query(ClassSession)
        .filter(
            ClassSession.classroom_id.in_(classroom_ids),
            ClassSession.end_time < now,
            ClassSession.id != exclude_session_id,
            ~ClassSession.attendances.any(
                and_(
                    Attendance.student_id == student_id,
                    Attendance.status.in_(RESOLVED_STATUSES),
                )
            ),
        )
        .order_by(ClassSession.start_time.desc())
        .limit(limit)
        .all()
    )


def get_unsigned_teacher_sessions(
    db: Session,
    teacher_id: int,
    exclude_session_id: int,
    now: datetime,
    limit: int,
) -> list[ClassSession]:
    return (
        db.query(ClassSession)
        .filter(
            ClassSession.teacher_id == teacher_id,
            ClassSession.end_time < now,
            ClassSession.teacher_signature.is_(None),
            ClassSession.id != exclude_session_id,
        )
        .order_by(ClassSession.start_time.desc())
        .limit(limit)
        .all()
    )
