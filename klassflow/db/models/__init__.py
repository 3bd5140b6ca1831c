from klassflow.db.base import Base
from klassflow.db.models.organization import Organization
from klassflow.db.models.user import User
from klassflow.db.models.classroom import Classroom, ClassroomEnrollment, classroom_teachers
from klassflow.db.models.class_session import ClassSession
from klassflow.db.models.signature_token import SignatureToken
from klassflow.db.models.attendance import Attendance

__all__ = [
    "Base",
    "Organization",
    "User",
    "Classroom",
    "ClassroomEnrollment",
    "classroom_teachers",
    "ClassSession",
    "SignatureToken",
    "Attendance",
]
