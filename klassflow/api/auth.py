from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from klassflow.api.deps import get_db
from klassflow.schemas.user import UserLogin, Token
from klassflow.crud import user as crud_user
from klassflow.core.security import verify_password, create_access_token

router = APIRouter()


@router.post("/login", response_model=Token)
def login(form: UserLogin, db: Session = Depends(get_db)):
    user = crud_user.get_user_by_email(db, form.email)
    if not user or not user.hashed_password or not verify_password(form.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    access_token = create_access_token(data={"sub": user.email})
    return {"access_token": access_token, "token_type": "bearer"}
