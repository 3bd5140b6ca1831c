# klassflow/api/signature_tokens.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from klassflow.api.deps import get_db, require_staff
from klassflow.core.notification_service import signature_link
from klassflow.core.signature_service import SIGNING_WINDOW, TokenLifecycle
from klassflow.crud import class_session as crud_session
from klassflow.db.models.user import User
from klassflow.schemas.session import GeneratedToken, TokenBatchRequest, TokenBatchResult

router = APIRouter()


@router.post("", response_model=TokenBatchResult)
def generate_tokens(
    body: TokenBatchRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    if not current_user.organization_id:
        raise HTTPException(status_code=401, detail="Unauthorized")

    session = crud_session.get_session(db, body.session_id)
    if not session or session.classroom.organization_id != current_user.organization_id:
        raise HTTPException(status_code=404, detail="Session not found")

    # Links generated ahead of time stay valid until 30 minutes into the session
    expires_at = session.start_time + SIGNING_WINDOW
    lifecycle = TokenLifecycle(db)

    tokens = []
    for student_id in body.student_ids:
        token = lifecycle.get_or_create_token(session.id, student_id, expires_at)
        tokens.append(GeneratedToken(student_id=student_id, token=token.token, url=signature_link(token.token)))
    return TokenBatchResult(tokens=tokens)
