# klassflow/core/attendance_service.py
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from klassflow.core.clock import utcnow
from klassflow.core.errors import PersistenceError
from klassflow.crud import attendance as crud_attendance
from klassflow.db.models.attendance import Attendance

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """
    Writes the outcome of a signature for a (session, subject) pair.

    Both writes overwrite the previous row: a second signature replaces
    the first one, an absence replaces a presence. Guarding against
    double signing is the token's job, not the recorder's.

    With commit=False the write is only flushed so the caller can commit
    it together with the token consumption.
    """

    def __init__(self, db: Session):
        self.db = db

    def record_presence(
        self,
        session_id: int,
        student_id: int,
        signature: str,
        ip_address: str | None = None,
        now: datetime | None = None,
        commit: bool = True,
    ) -> Attendance:
        now = now or utcnow()
        return self._write(
            session_id,
            student_id,
            commit,
            status="PRESENT",
            signature_url=signature,
            signed_at=now,
            ip_address=ip_address,
        )

    def record_absence(
        self,
        session_id: int,
        student_id: int,
        reason: str,
        now: datetime | None = None,
        commit: bool = True,
    ) -> Attendance:
        now = now or utcnow()
        return self._write(
            session_id,
            student_id,
            commit,
            status="ABSENT",
            proof_url=f"Reason: {reason}",
            signed_at=now,
        )

    def _write(self, session_id: int, student_id: int, commit: bool, **fields) -> Attendance:
        try:
            attendance = crud_attendance.upsert_attendance(self.db, session_id, student_id, **fields)
            if commit:
                self.db.commit()
                self.db.refresh(attendance)
        except SQLAlchemyError:
            logger.exception(
                "Attendance write failed for session_id=%s student_id=%s", session_id, student_id
            )
            self.db.rollback()
            raise PersistenceError()
        logger.info(
            "Attendance %s for session_id=%s student_id=%s",
            fields["status"], session_id, student_id,
        )
        return attendance
