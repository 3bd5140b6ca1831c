# klassflow/core/reports.py
import calendar
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from klassflow.crud import classroom as crud_classroom
from klassflow.db.models.classroom import Classroom

DEFAULT_TEACHER_NAME = "Formateur"


def report_window(range_name: str, reference: datetime) -> tuple[datetime, datetime]:
    """Monday-to-Sunday week, or calendar month, containing the reference date."""
    day = reference.replace(hour=0, minute=0, second=0, microsecond=0)
    if range_name == "month":
        start = day.replace(day=1)
        last_day = calendar.monthrange(day.year, day.month)[1]
        end = day.replace(day=last_day) + timedelta(days=1) - timedelta(microseconds=1)
    else:
        start = day - timedelta(days=day.weekday())
        end = start + timedelta(days=7) - timedelta(microseconds=1)
    return start, end


def _hours(session) -> float:
    return (session.end_time - session.start_time).total_seconds() / 3600


def _location(classroom: Classroom, session_type: str) -> str:
    if session_type == "ONSITE":
        return classroom.location_on_site or "Sur site"
    if session_type in ("ONLINE", "HOMEWORK"):
        return classroom.location_online or "En ligne"
    return "Non spécifié"


def build_attendance_report(db: Session, classroom: Classroom, range_name: str, reference: datetime) -> dict:
    start, end = report_window(range_name, reference)
    sessions = crud_classroom.get_sessions_between(db, classroom.id, start, end)

    enrollments = sorted(
        crud_classroom.get_enrollments(db, classroom.id),
        key=lambda e: (e.student.name or "").lower(),
    )
    enrolled_ids = {e.student_id for e in enrollments}
    fallback_teacher = classroom.teachers[0].name if classroom.teachers else DEFAULT_TEACHER_NAME

    # Hours per teacher, busiest first
    teacher_hours: dict[str, float] = {}
    for session in sessions:
        name = (session.teacher.name if session.teacher else None) or fallback_teacher
        teacher_hours[name] = teacher_hours.get(name, 0.0) + _hours(session)
    ranked = sorted(teacher_hours.items(), key=lambda item: item[1], reverse=True)
    teacher_name = ", ".join(name for name, _ in ranked) if ranked else fallback_teacher

    rows = []
    teacher_total = 0.0
    student_total = 0.0
    expected_total = 0.0
    for session in sessions:
        by_student = {a.student_id: a for a in session.attendances}
        students = []
        for enrollment in enrollments:
            attendance = by_student.get(enrollment.student_id)
            students.append({
                "name": enrollment.student.name or "Inconnu",
                "status": attendance.status if attendance else "PENDING",
                "signature": attendance.signature_url if attendance else None,
            })
        rows.append({
            "id": session.id,
            "start_time": session.start_time,
            "end_time": session.end_time,
            "type": session.type,
            "teacher_signature": session.teacher_signature,
            "location": _location(classroom, session.type),
            "teacher_name": (session.teacher.name if session.teacher else None) or teacher_name,
            "students": students,
        })

        duration = _hours(session)
        teacher_total += duration
        present = sum(
            1 for a in session.attendances
            if a.status == "PRESENT" and a.student_id in enrolled_ids
        )
        student_total += duration * present
        expected_total += duration * len(enrollments)

    return {
        "organization_name": classroom.organization.name,
        "classroom_name": classroom.name,
        "teacher_name": teacher_name,
        "start_date": start,
        "end_date": end,
        "sessions": rows,
        "totals": {
            "teacher_hours": round(teacher_total, 2),
            "student_hours": round(student_total, 2),
            "expected_student_hours": round(expected_total, 2),
        },
    }
