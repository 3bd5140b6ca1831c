# klassflow/api/deps.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from klassflow.core.errors import Forbidden
from klassflow.core.notification_service import SignatureMailer
from klassflow.core.security import decode_access_token
from klassflow.crud import user as crud_user
from klassflow.db.models.user import User
from klassflow.db.session import SessionLocal

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

STAFF_ROLES = ("SUPER_ADMIN", "ADMIN", "TEACHER")
ORG_WIDE_ROLES = ("SUPER_ADMIN", "ADMIN")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_mailer() -> SignatureMailer:
    return SignatureMailer()


def get_current_user(token: str | None = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception
    email = payload.get("sub")
    if not email:
        raise credentials_exception
    user = crud_user.get_user_by_email(db, email)
    if not user:
        raise credentials_exception
    return user


def require_staff(current_user: User = Depends(get_current_user)) -> User:
    if current_user.role not in STAFF_ROLES:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return current_user


def ensure_same_organization(user: User, organization_id: int) -> None:
    if user.role not in ORG_WIDE_ROLES and user.organization_id != organization_id:
        raise Forbidden()
