from sqlalchemy.orm import Session
from klassflow.db.models.user import User
from klassflow.core.security import get_password_hash


def get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


def get_user_by_id(db: Session, user_id: int):
    return db.query(User).filter(User.id == user_id).first()


def create_user(db: Session, email: str, name: str | None, role: str,
                organization_id: int | None = None, password: str | None = None):
    db_user = User(
        email=email,
        name=name,
        role=role,
        organization_id=organization_id,
        hashed_password=get_password_hash(password) if password else None,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user
