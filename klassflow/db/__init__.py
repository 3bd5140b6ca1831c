# klassflow/db/__init__.py
# Importing klassflow.db registers every model on Base.metadata

from klassflow.db.models import (
    Base,
    Organization,
    User,
    Classroom,
    ClassroomEnrollment,
    ClassSession,
    SignatureToken,
    Attendance,
)

__all__ = [
    "Base",
    "Organization",
    "User",
    "Classroom",
    "ClassroomEnrollment",
    "ClassSession",
    "SignatureToken",
    "Attendance",
]
