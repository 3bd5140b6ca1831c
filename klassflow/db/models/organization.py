from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from klassflow.db.base import Base


class Organization(Base):
    __tablename__ = "organizations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)

    classrooms = relationship("Classroom", back_populates="organization")
