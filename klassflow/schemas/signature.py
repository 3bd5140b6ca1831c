# klassflow/schemas/signature.py
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from klassflow.schemas.base import CamelModel
from klassflow.schemas.user import UserOut


class SignatureSubmit(CamelModel):
    signature_data: str = Field(min_length=1)


class AbsenceSubmit(CamelModel):
    reason: str = Field(min_length=1)


class OrganizationOut(CamelModel):
    name: str


class ClassroomOut(CamelModel):
    id: int
    name: str
    organization: Optional[OrganizationOut] = None


class SessionOut(CamelModel):
    id: int
    title: Optional[str] = None
    start_time: datetime
    end_time: datetime
    classroom: ClassroomOut


class MissedSessionOut(CamelModel):
    id: int
    title: Optional[str] = None
    classroom_name: str
    start_time: datetime
    end_time: datetime
    type: Optional[str] = None
    token: str


class TokenValidationOut(CamelModel):
    student: UserOut
    session: SessionOut
    already_signed: bool
    missed_sessions: List[MissedSessionOut]


class AttendanceOut(CamelModel):
    id: int
    session_id: int
    student_id: int
    status: str
    signature_url: Optional[str] = None
    proof_url: Optional[str] = None
    signed_at: Optional[datetime] = None
    ip_address: Optional[str] = None


class SignatureResult(CamelModel):
    success: bool = True
    attendance: AttendanceOut
    missed_sessions: List[MissedSessionOut]


class AbsenceResult(CamelModel):
    success: bool = True
    missed_sessions: List[MissedSessionOut]
    organization_name: Optional[str] = None


class TeacherTokenValidationOut(CamelModel):
    teacher: UserOut
    session: SessionOut
    signed: bool
    missed_sessions: List[MissedSessionOut]


class SuccessOut(CamelModel):
    success: bool = True
