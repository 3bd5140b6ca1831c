# klassflow/core/signature_service.py
"""
Signature token lifecycle.

A token is ACTIVE while unused and not past expires_at, EXPIRED once the
clock passes expires_at, CONSUMED once used_at is stamped. Expiry is only
ever observed at read time; nothing writes it. EXPIRED and CONSUMED are
terminal for a token value: re-authorizing a pair means renewing the
pair's unconsumed token or minting a new one.

Every public method commits its own unit of work. Consumption stamps the
token and writes the attendance row in one transaction, with the stamp
done as a conditional UPDATE so two concurrent requests cannot both
consume the same token.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from klassflow.core.attendance_service import AttendanceRecorder
from klassflow.core.clock import utcnow
from klassflow.core.errors import (
    AlreadyUsed,
    Expired,
    PersistenceError,
    SignatureError,
    TokenNotFound,
)
from klassflow.crud import attendance as crud_attendance
from klassflow.crud import signature_token as crud_token
from klassflow.db.models.attendance import Attendance
from klassflow.db.models.signature_token import SignatureToken

logger = logging.getLogger(__name__)

# TTL policies per call site
RESEND_TTL = timedelta(minutes=30)
BACKFILL_TTL = timedelta(hours=1)
REQUEST_TTL = timedelta(days=7)
SIGNING_WINDOW = timedelta(minutes=30)  # after session start, for generated links

ACTIVE = "ACTIVE"
EXPIRED = "EXPIRED"
CONSUMED = "CONSUMED"


def token_state(token: SignatureToken, now: datetime) -> str:
    if token.used_at is not None:
        return CONSUMED
    if now > token.expires_at:
        return EXPIRED
    return ACTIVE


@dataclass
class TokenValidation:
    token: SignatureToken
    state: str
    already_signed: bool

    @property
    def session(self):
        return self.token.session

    @property
    def subject(self):
        return self.token.student


class TokenLifecycle:
    def __init__(self, db: Session, recorder: AttendanceRecorder | None = None):
        self.db = db
        self.recorder = recorder or AttendanceRecorder(db)

    @contextmanager
    def unit_of_work(self, action: str):
        try:
            yield
            self.db.commit()
        except SignatureError:
            self.db.rollback()
            raise
        except SQLAlchemyError:
            logger.exception("Signature token %s failed", action)
            self.db.rollback()
            raise PersistenceError()

    def get_token(self, value: str) -> SignatureToken:
        token = crud_token.get_token_by_value(self.db, value)
        if not token:
            raise TokenNotFound()
        return token

    def validate(self, value: str, now: datetime | None = None) -> TokenValidation:
        """
        Read access to a token.

        Expired tokens fail even when already used. A consumed token still
        validates, reported as already signed, so the page can say so
        instead of erroring.
        """
        now = now or utcnow()
        token = self.get_token(value)

        logger.debug(
            "Validating signature token id=%s expires_at=%s now=%s remaining=%.0fs",
            token.id, token.expires_at.isoformat(), now.isoformat(),
            (token.expires_at - now).total_seconds(),
        )

        if now > token.expires_at:
            raise Expired()

        already_signed = token.used_at is not None

        # Presence may have been recorded through another token or by a teacher
        attendance = crud_attendance.get_attendance(self.db, token.session_id, token.student_id)
        if attendance and (attendance.status == "PRESENT" or attendance.signature_url):
            already_signed = True

        return TokenValidation(token=token, state=token_state(token, now), already_signed=already_signed)

    def ensure_active(self, token: SignatureToken, now: datetime, used_status: int | None = None):
        if now > token.expires_at:
            raise Expired()
        if token.used_at is not None:
            raise AlreadyUsed(status_code=used_status)

    def issue_or_renew(
        self,
        session_id: int,
        student_id: int,
        ttl: timedelta,
        now: datetime | None = None,
        stamp_email: bool = True,
    ) -> SignatureToken:
        """
        Return the pair's unconsumed token with a fresh expiry, minting one
        if there is none. Expired-but-unused tokens are renewed, not replaced.
        """
        now = now or utcnow()
        expires_at = now + ttl
        email_sent_at = now if stamp_email else None

        with self.unit_of_work("issue"):
            token = crud_token.get_open_token(self.db, session_id, student_id)
            if token is None:
                try:
                    token = crud_token.create_token(
                        self.db, session_id, student_id, expires_at, email_sent_at=email_sent_at
                    )
                    logger.info("Issued signature token for session_id=%s student_id=%s", session_id, student_id)
                    return token
                except IntegrityError:
                    # A concurrent request created the open token first
                    self.db.rollback()
                    token = crud_token.get_open_token(self.db, session_id, student_id)
                    if token is None:
                        raise PersistenceError()

            token.expires_at = expires_at
            if stamp_email:
                token.email_sent_at = email_sent_at
            logger.info("Renewed signature token id=%s until %s", token.id, expires_at.isoformat())
        return token

    def resolve_backfill_token(
        self,
        session_id: int,
        student_id: int,
        ttl: timedelta = BACKFILL_TTL,
        now: datetime | None = None,
    ) -> SignatureToken:
        """An active token for the pair: reused untouched if one exists, otherwise renewed or minted."""
        now = now or utcnow()
        token = crud_token.get_open_token(self.db, session_id, student_id)
        if token is not None and token_state(token, now) == ACTIVE:
            return token
        return self.issue_or_renew(session_id, student_id, ttl, now=now, stamp_email=False)

    def get_or_create_token(self, session_id: int, student_id: int, expires_at: datetime) -> SignatureToken:
        """Reuse the pair's unconsumed token as is, or create one with the given expiry."""
        with self.unit_of_work("generation"):
            token = crud_token.get_open_token(self.db, session_id, student_id)
            if token is not None:
                return token
            try:
                token = crud_token.create_token(self.db, session_id, student_id, expires_at)
            except IntegrityError:
                self.db.rollback()
                token = crud_token.get_open_token(self.db, session_id, student_id)
                if token is None:
                    raise PersistenceError()
        return token

    def replace_token(self, session_id: int, student_id: int, expires_at: datetime) -> SignatureToken:
        """Drop every token of the pair, used or not, and mint a fresh one."""
        with self.unit_of_work("replacement"):
            crud_token.delete_tokens_for(self.db, session_id, student_id)
            token = crud_token.create_token(self.db, session_id, student_id, expires_at)
        return token

    def mark_email_sent(self, token: SignatureToken, now: datetime | None = None) -> SignatureToken:
        with self.unit_of_work("email stamp"):
            token.email_sent_at = now or utcnow()
        return token

    def consume(
        self,
        value: str,
        signature: str,
        ip_address: str | None = None,
        now: datetime | None = None,
    ) -> tuple[SignatureToken, Attendance]:
        now = now or utcnow()
        token = self.get_token(value)
        self.ensure_active(token, now)

        with self.unit_of_work("consumption"):
            if not crud_token.claim_token(self.db, token.id, now):
                raise AlreadyUsed()
            attendance = self.recorder.record_presence(
                token.session_id, token.student_id, signature,
                ip_address=ip_address, now=now, commit=False,
            )

        logger.info("Signature recorded with token id=%s", token.id)
        return token, attendance

    def declare_absence(
        self,
        value: str,
        reason: str,
        now: datetime | None = None,
    ) -> tuple[SignatureToken, Attendance]:
        now = now or utcnow()
        token = self.get_token(value)
        self.ensure_active(token, now, used_status=400)

        with self.unit_of_work("absence"):
            if not crud_token.claim_token(self.db, token.id, now):
                raise AlreadyUsed(status_code=400)
            attendance = self.recorder.record_absence(
                token.session_id, token.student_id, reason, now=now, commit=False,
            )

        logger.info("Absence declared with token id=%s", token.id)
        return token, attendance

    def reset_signature(
        self,
        session_id: int,
        student_id: int,
        ttl: timedelta = REQUEST_TTL,
        now: datetime | None = None,
    ) -> SignatureToken | None:
        """
        Remove the pair's attendance and reopen its most recent token so the
        same link can be signed again. Older tokens of the pair are dropped.
        """
        now = now or utcnow()
        with self.unit_of_work("reset"):
            crud_attendance.delete_attendance(self.db, session_id, student_id)
            tokens = crud_token.get_tokens_for(self.db, session_id, student_id)
            if not tokens:
                return None
            latest, older = tokens[0], tokens[1:]
            for token in older:
                self.db.delete(token)
            self.db.flush()
            latest.used_at = None
            latest.expires_at = now + ttl
        return latest
