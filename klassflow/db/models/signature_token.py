# klassflow/db/models/signature_token.py
import secrets

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from klassflow.db.base import Base
from klassflow.core.clock import utcnow


def generate_token_value() -> str:
    return secrets.token_urlsafe(32)


class SignatureToken(Base):
    __tablename__ = "signature_tokens"
    __table_args__ = (
        # At most one unconsumed token per (session, subject)
        Index(
            "uq_signature_tokens_open",
            "session_id",
            "student_id",
            unique=True,
            sqlite_where=text("used_at IS NULL"),
            postgresql_where=text("used_at IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    token = Column(String, unique=True, index=True, nullable=False, default=generate_token_value)
    session_id = Column(Integer, ForeignKey("class_sessions.id"), nullable=False)
    # Subject allowed to sign: a student, or a teacher signing for themselves
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime, nullable=True)
    email_sent_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    session = relationship("ClassSession")
    student = relationship("User")
