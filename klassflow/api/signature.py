# klassflow/api/signature.py
# Public pages reached from the emailed link: the token is the only credential.
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from klassflow.api.deps import get_db
from klassflow.core.missed_sessions import MissedSession, MissedSessionResolver
from klassflow.core.signature_service import TokenLifecycle
from klassflow.db.models.signature_token import SignatureToken
from klassflow.schemas.signature import (
    AbsenceResult,
    AbsenceSubmit,
    MissedSessionOut,
    SignatureResult,
    SignatureSubmit,
    TokenValidationOut,
)

router = APIRouter()


def serialize_missed(missed: List[MissedSession]) -> List[MissedSessionOut]:
    return [
        MissedSessionOut(
            id=m.session.id,
            title=m.session.title,
            classroom_name=m.classroom_name,
            start_time=m.session.start_time,
            end_time=m.session.end_time,
            type=m.session.type,
            token=m.token,
        )
        for m in missed
    ]


def missed_for(db: Session, lifecycle: TokenLifecycle, token: SignatureToken) -> List[MissedSessionOut]:
    resolver = MissedSessionResolver(db, lifecycle)
    session = token.session
    return serialize_missed(
        resolver.find_missed_sessions(
            student_id=token.student_id,
            current_session_id=token.session_id,
            current_classroom_id=session.classroom_id if session else None,
        )
    )


def client_ip(request: Request) -> str:
    return (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or "unknown"
    )


@router.get("/{token}", response_model=TokenValidationOut)
def validate_token(token: str, db: Session = Depends(get_db)):
    lifecycle = TokenLifecycle(db)
    validation = lifecycle.validate(token)
    missed = missed_for(db, lifecycle, validation.token)
    return TokenValidationOut(
        student=validation.subject,
        session=validation.session,
        already_signed=validation.already_signed,
        missed_sessions=missed,
    )


@router.post("/{token}", response_model=SignatureResult)
def submit_signature(token: str, body: SignatureSubmit, request: Request, db: Session = Depends(get_db)):
    lifecycle = TokenLifecycle(db)
    signature_token, attendance = lifecycle.consume(token, body.signature_data, ip_address=client_ip(request))
    missed = missed_for(db, lifecycle, signature_token)
    return SignatureResult(attendance=attendance, missed_sessions=missed)


@router.post("/{token}/absence", response_model=AbsenceResult)
def declare_absence(token: str, body: AbsenceSubmit, db: Session = Depends(get_db)):
    lifecycle = TokenLifecycle(db)
    signature_token, _ = lifecycle.declare_absence(token, body.reason)
    missed = missed_for(db, lifecycle, signature_token)
    return AbsenceResult(
        missed_sessions=missed,
        organization_name=signature_token.session.classroom.organization.name,
    )
