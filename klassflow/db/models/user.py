from sqlalchemy import Column, Integer, String, Enum, ForeignKey
from sqlalchemy.orm import relationship
from klassflow.db.base import Base

ROLES = ("SUPER_ADMIN", "ADMIN", "TEACHER", "STUDENT")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=True)  # invited students never log in
    name = Column(String, nullable=True)
    role = Column(Enum(*ROLES, name="user_role"), nullable=False, default="STUDENT")
    organization_id = Column(Integer, ForeignKey("organizations.id"), nullable=True)

    organization = relationship("Organization")
    enrollments = relationship("ClassroomEnrollment", back_populates="student")
