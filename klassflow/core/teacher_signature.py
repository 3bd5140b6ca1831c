# klassflow/core/teacher_signature.py
"""
Teachers sign their own sessions through the same token table, with the
teacher as the token subject. Their signature is kept on the session
itself instead of in an attendance row.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from klassflow.core.clock import utcnow
from klassflow.core.errors import AlreadyUsed, Expired
from klassflow.core.signature_service import REQUEST_TTL, TokenLifecycle
from klassflow.crud import signature_token as crud_token
from klassflow.db.models.class_session import ClassSession
from klassflow.db.models.signature_token import SignatureToken

logger = logging.getLogger(__name__)


@dataclass
class TeacherTokenValidation:
    token: SignatureToken
    signed: bool


class TeacherSignatureFlow:
    def __init__(self, db: Session, lifecycle: TokenLifecycle | None = None):
        self.db = db
        self.lifecycle = lifecycle or TokenLifecycle(db)

    def request_token(self, session: ClassSession, teacher_id: int, now: datetime | None = None) -> SignatureToken:
        return self.lifecycle.resolve_backfill_token(session.id, teacher_id, REQUEST_TTL, now=now)

    def validate(self, value: str, now: datetime | None = None) -> TeacherTokenValidation:
        now = now or utcnow()
        token = self.lifecycle.get_token(value)
        if now > token.expires_at:
            raise Expired()
        return TeacherTokenValidation(token=token, signed=bool(token.session.teacher_signature))

    def sign(self, value: str, signature: str, now: datetime | None = None) -> SignatureToken:
        now = now or utcnow()
        token = self.lifecycle.get_token(value)
        self.lifecycle.ensure_active(token, now)

        with self.lifecycle.unit_of_work("teacher signature"):
            if not crud_token.claim_token(self.db, token.id, now):
                raise AlreadyUsed()
            session = token.session
            session.teacher_signature = signature
            # The signing teacher becomes the session's teacher
            session.teacher_id = token.student_id

        logger.info("Teacher signature stored for session_id=%s", token.session_id)
        return token

    def sign_in_person(self, session: ClassSession, signature: str) -> ClassSession:
        """Teacher signing their own session from the shared device, no token involved."""
        with self.lifecycle.unit_of_work("in-person teacher signature"):
            session.teacher_signature = signature
        logger.info("Teacher signature stored in person for session_id=%s", session.id)
        return session
