from pydantic import BaseModel
from typing import Optional

from klassflow.schemas.base import CamelModel


class UserLogin(BaseModel):
    email: str
    password: str


class Token(BaseModel):
    access_token: str
    token_type: str


class UserOut(CamelModel):
    id: int
    name: Optional[str] = None
    email: str
