# klassflow/db/models/attendance.py
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from klassflow.db.base import Base

# Attendance status:
# no row: PENDING
# "PRESENT" signed by the subject (or by a teacher on a shared device)
# "ABSENT" absence declared, reason kept in proof_url
# "EXCUSED" absence justified
ATTENDANCE_STATUSES = ("PRESENT", "ABSENT", "EXCUSED")


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (
        UniqueConstraint("session_id", "student_id", name="uq_attendance_session_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("class_sessions.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    status = Column(Enum(*ATTENDANCE_STATUSES, name="attendance_status"), nullable=False)
    signature_url = Column(Text, nullable=True)  # data URL of the drawn signature
    proof_url = Column(String, nullable=True)    # also carries "Reason: ..." for absences
    signed_at = Column(DateTime, nullable=True)
    ip_address = Column(String, nullable=True)

    session = relationship("ClassSession", back_populates="attendances")
    student = relationship("User")
