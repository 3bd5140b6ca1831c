# klassflow/schemas/session.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from klassflow.schemas.base import CamelModel


class ResendSignatureRequest(CamelModel):
    student_id: int
    ttl_minutes: int = Field(30, gt=0)


class SendAttendanceRequest(CamelModel):
    # None or empty means every enrolled student
    student_ids: Optional[List[int]] = None


class SendAttendanceResult(CamelModel):
    message: str
    count: int


class DeviceSignRequest(CamelModel):
    student_id: int
    signature_data: str = Field(min_length=1)


class TeacherSignatureRequest(CamelModel):
    teacher_id: int


class IssuedTokenOut(CamelModel):
    success: bool = True
    token_value: str
    expires_at: datetime


class TokenBatchRequest(CamelModel):
    session_id: int
    student_ids: List[int] = Field(min_length=1)


class GeneratedToken(CamelModel):
    student_id: int
    token: str
    url: str


class TokenBatchResult(CamelModel):
    tokens: List[GeneratedToken]
