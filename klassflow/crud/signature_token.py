# klassflow/crud/signature_token.py
# Token store. Nothing here commits: the calling service owns the transaction.
from datetime import datetime

from sqlalchemy.orm import Session
from klassflow.db.models.signature_token import SignatureToken


def get_token_by_value(db: Session, value: str):
    return db.query(SignatureToken).filter(SignatureToken.token == value).first()


def get_open_token(db: Session, session_id: int, student_id: int):
    """The unconsumed token of the pair, expired or not."""
    return db.query(SignatureToken).filter(
        SignatureToken.session_id == session_id,
        SignatureToken.student_id == student_id,
        SignatureToken.used_at.is_(None),
    ).first()


def get_tokens_for(db: Session, session_id: int, student_id: int) -> list[SignatureToken]:
    return (
        db.query(SignatureToken)
        .filter(
            SignatureToken.session_id == session_id,
            SignatureToken.student_id == student_id,
        )
        .order_by(SignatureToken.created_at.desc(), SignatureToken.id.desc())
        .all()
    )


def create_token(db: Session, session_id: int, student_id: int, expires_at: datetime,
                 email_sent_at: datetime | None = None) -> SignatureToken:
    token = SignatureToken(
        session_id=session_id,
        student_id=student_id,
        expires_at=expires_at,
        email_sent_at=email_sent_at,
    )
    db.add(token)
    db.flush()
    return token


def claim_token(db: Session, token_id: int, now: datetime) -> bool:
    """Stamp used_at only if the token is still active. False when another request won."""
    updated = (
        db.query(SignatureToken)
        .filter(
            SignatureToken.id == token_id,
            SignatureToken.used_at.is_(None),
            SignatureToken.expires_at >= now,
        )
        .update({SignatureToken.used_at: now}, synchronize_session=False)
    )
    return updated == 1


def delete_tokens_for(db: Session, session_id: int, student_id: int) -> int:
    return (
        db.query(SignatureToken)
        .filter(
            SignatureToken.session_id == session_id,
            SignatureToken.student_id == student_id,
        )
        .delete(synchronize_session="fetch")
    )
