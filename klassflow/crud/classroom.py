from datetime import datetime

from sqlalchemy.orm import Session
from klassflow.db.models.classroom import Classroom, ClassroomEnrollment
from klassflow.db.models.class_session import ClassSession


def get_classroom(db: Session, classroom_id: int):
    return db.query(Classroom).filter(Classroom.id == classroom_id).first()


def get_enrolled_classroom_ids(db: Session, student_id: int) -> list[int]:
    rows = db.query(ClassroomEnrollment.classroom_id).filter(
        ClassroomEnrollment.student_id == student_id
    ).all()
    return [row[0] for row in rows]


def get_enrollments(db: Session, classroom_id: int) -> list[ClassroomEnrollment]:
    return db.query(ClassroomEnrollment).filter(
        ClassroomEnrollment.classroom_id == classroom_id
    ).all()


def get_sessions_between(db: Session, classroom_id: int, start: datetime, end: datetime):
    return (
        db.query(ClassSession)
        .filter(
            ClassSession.classroom_id == classroom_id,
            ClassSession.start_time >= start,
            ClassSession.start_time <= end,
        )
        .order_by(ClassSession.start_time.asc())
        .all()
    )
