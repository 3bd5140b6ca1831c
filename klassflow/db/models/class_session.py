from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from klassflow.db.base import Base

SESSION_TYPES = ("ONSITE", "ONLINE", "HOMEWORK")


class ClassSession(Base):
    __tablename__ = "class_sessions"

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False, index=True)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    title = Column(String, nullable=True)
    type = Column(Enum(*SESSION_TYPES, name="session_type"), nullable=False, default="ONSITE")
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    # Teacher's own signature, stored on the session rather than in attendances
    teacher_signature = Column(Text, nullable=True)

    classroom = relationship("Classroom", back_populates="sessions")
    teacher = relationship("User")
    attendances = relationship("Attendance", back_populates="session")
