# klassflow/crud/attendance.py
from sqlalchemy.orm import Session
from klassflow.db.models.attendance import Attendance


def get_attendance(db: Session, session_id: int, student_id: int):
    return db.query(Attendance).filter(
        Attendance.session_id == session_id,
        Attendance.student_id == student_id,
    ).first()


def upsert_attendance(db: Session, session_id: int, student_id: int, **fields) -> Attendance:
    """Create the (session, student) row or overwrite the given fields on the existing one."""
    existing = get_attendance(db, session_id, student_id)
    if existing:
        for name, value in fields.items():
            setattr(existing, name, value)
    else:
        existing = Attendance(session_id=session_id, student_id=student_id, **fields)
        db.add(existing)
    db.flush()
    return existing


def delete_attendance(db: Session, session_id: int, student_id: int) -> int:
    return db.query(Attendance).filter(
        Attendance.session_id == session_id,
        Attendance.student_id == student_id,
    ).delete(synchronize_session="fetch")
