# klassflow/db/models/classroom.py
from sqlalchemy import Column, Integer, String, ForeignKey, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from klassflow.db.base import Base

classroom_teachers = Table(
    "classroom_teachers",
    Base.metadata,
    Column("classroom_id", Integer, ForeignKey("classrooms.id"), primary_key=True),
    Column("teacher_id", Integer, ForeignKey("users.id"), primary_key=True),
)


class Classroom(Base):
    __tablename__ = "classrooms"

    id = Column(Integer, primary_key=True, index=True)
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=False)
    name = Column(String, nullable=False)
    location_on_site = Column(String, nullable=True)  # address shown for ONSITE sessions
    location_online = Column(String, nullable=True)   # link shown for ONLINE and HOMEWORK

    organization = relationship("Organization", back_populates="classrooms")
    teachers = relationship("User", secondary=classroom_teachers)
    enrollments = relationship("ClassroomEnrollment", back_populates="classroom")
    sessions = relationship("ClassSession", back_populates="classroom")


class ClassroomEnrollment(Base):
    __tablename__ = "classroom_enrollments"
    __table_args__ = (
        UniqueConstraint("classroom_id", "student_id", name="uq_enrollment_classroom_student"),
    )

    id = Column(Integer, primary_key=True, index=True)
    classroom_id = Column(Integer, ForeignKey("classrooms.id"), nullable=False)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    classroom = relationship("Classroom", back_populates="enrollments")
    student = relationship("User", back_populates="enrollments")
