# klassflow/api/teacher_signature.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from klassflow.api.deps import get_db
from klassflow.api.signature import serialize_missed
from klassflow.core.missed_sessions import MissedSessionResolver
from klassflow.core.teacher_signature import TeacherSignatureFlow
from klassflow.schemas.signature import SignatureSubmit, SuccessOut, TeacherTokenValidationOut

router = APIRouter()


@router.get("/{token}", response_model=TeacherTokenValidationOut)
def validate_teacher_token(token: str, db: Session = Depends(get_db)):
    flow = TeacherSignatureFlow(db)
    validation = flow.validate(token)
    signature_token = validation.token

    missed = MissedSessionResolver(db, flow.lifecycle).find_missed_teacher_sessions(
        teacher_id=signature_token.student_id,
        current_session_id=signature_token.session_id,
    )
    return TeacherTokenValidationOut(
        teacher=signature_token.student,
        session=signature_token.session,
        signed=validation.signed,
        missed_sessions=serialize_missed(missed),
    )


@router.post("/{token}", response_model=SuccessOut)
def submit_teacher_signature(token: str, body: SignatureSubmit, db: Session = Depends(get_db)):
    TeacherSignatureFlow(db).sign(token, body.signature_data)
    return SuccessOut()
