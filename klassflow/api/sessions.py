# klassflow/api/sessions.py
# Staff operations on a class session: sending links, in-person signing, resets.
import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from klassflow.api.deps import ensure_same_organization, get_db, get_mailer, require_staff
from klassflow.core.errors import NotificationError
from klassflow.core.attendance_service import AttendanceRecorder
from klassflow.core.clock import utcnow
from klassflow.core.missed_sessions import MAX_MISSED_SESSIONS
from klassflow.core.notification_service import (
    SessionInfo,
    SignatureMailer,
    signature_link,
    teacher_signature_link,
)
from klassflow.core.signature_service import REQUEST_TTL, TokenLifecycle
from klassflow.core.teacher_signature import TeacherSignatureFlow
from klassflow.crud import class_session as crud_session
from klassflow.crud import user as crud_user
from klassflow.db.models.user import User
from klassflow.schemas.session import (
    DeviceSignRequest,
    IssuedTokenOut,
    ResendSignatureRequest,
    SendAttendanceRequest,
    SendAttendanceResult,
    TeacherSignatureRequest,
)
from klassflow.schemas.signature import SuccessOut

logger = logging.getLogger(__name__)

router = APIRouter()


def get_session_or_404(db: Session, session_id: int):
    session = crud_session.get_session(db, session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.post("/{session_id}/resend-signature", response_model=IssuedTokenOut)
def resend_signature(
    session_id: int,
    body: ResendSignatureRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
    mailer: SignatureMailer = Depends(get_mailer),
):
    session = get_session_or_404(db, session_id)
    ensure_same_organization(current_user, session.classroom.organization_id)

    student = crud_user.get_user_by_id(db, body.student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")

    # Counted from now, whatever the session time
    ttl = timedelta(minutes=body.ttl_minutes)
    token = TokenLifecycle(db).issue_or_renew(session.id, student.id, ttl)

    mailer.send_signature_email(
        student.email,
        student.name or "Étudiant",
        signature_link(token.token),
        SessionInfo.from_session(session),
        organization_name=session.classroom.organization.name,
    )
    return IssuedTokenOut(token_value=token.token, expires_at=token.expires_at)


@router.post("/{session_id}/send-attendance", response_model=SendAttendanceResult)
def send_attendance(
    session_id: int,
    body: SendAttendanceRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
    mailer: SignatureMailer = Depends(get_mailer),
):
    session = get_session_or_404(db, session_id)
    ensure_same_organization(current_user, session.classroom.organization_id)
    classroom = session.classroom

    students = [e.student for e in classroom.enrollments if e.student.email]
    if body.student_ids:
        wanted = set(body.student_ids)
        students = [s for s in students if s.id in wanted]

    logger.info("Found %d students to email for session %s", len(students), session.id)

    lifecycle = TokenLifecycle(db)
    info = SessionInfo.from_session(session)
    expires_at = utcnow() + REQUEST_TTL
    sent = 0
    for student in students:
        token = lifecycle.replace_token(session.id, student.id, expires_at)
        try:
            mailer.send_signature_email(
                student.email,
                student.name or "Étudiant",
                signature_link(token.token),
                info,
                organization_name=classroom.organization.name,
            )
        except NotificationError:
            logger.warning("Failed to send signature email to %s", student.email)
            continue
        lifecycle.mark_email_sent(token)
        sent += 1

    return SendAttendanceResult(
        message=(
            f"Sent attendance request to {sent} students "
            f"(Classroom: {classroom.name}, Enrollments: {len(classroom.enrollments)})"
        ),
        count=sent,
    )


@router.post("/{session_id}/sign", response_model=SuccessOut)
def sign_in_person(
    session_id: int,
    body: DeviceSignRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    # Shared-device mode: the authenticated teacher is trusted, no token involved
    session = get_session_or_404(db, session_id)
    ensure_same_organization(current_user, session.classroom.organization_id)

    if body.student_id == current_user.id:
        TeacherSignatureFlow(db).sign_in_person(session, body.signature_data)
    else:
        AttendanceRecorder(db).record_presence(session.id, body.student_id, body.signature_data)
    return SuccessOut()


@router.delete("/{session_id}/attendance/{student_id}", response_model=SuccessOut)
def remove_attendance(
    session_id: int,
    student_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    session = get_session_or_404(db, session_id)
    ensure_same_organization(current_user, session.classroom.organization_id)

    TokenLifecycle(db).reset_signature(session.id, student_id)
    return SuccessOut()


@router.post("/{session_id}/request-signature", response_model=SuccessOut)
def request_teacher_signature(
    session_id: int,
    body: TeacherSignatureRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
    mailer: SignatureMailer = Depends(get_mailer),
):
    session = get_session_or_404(db, session_id)
    ensure_same_organization(current_user, session.classroom.organization_id)

    teacher = crud_user.get_user_by_id(db, body.teacher_id)
    if not teacher:
        raise HTTPException(status_code=404, detail="Teacher not found")

    flow = TeacherSignatureFlow(db)
    pending = crud_session.get_unsigned_teacher_sessions(
        db,
        teacher_id=teacher.id,
        exclude_session_id=session.id,
        now=utcnow(),
        limit=MAX_MISSED_SESSIONS,
    )
    token = flow.request_token(session, teacher.id)

    mailer.send_teacher_signature_request(
        teacher.email,
        teacher.name or "Formateur",
        teacher_signature_link(token.token),
        SessionInfo.from_session(session),
        [SessionInfo.from_session(s) for s in pending],
        organization_name=session.classroom.organization.name,
    )
    return SuccessOut()
