from datetime import datetime
from typing import List, Optional

from klassflow.schemas.base import CamelModel


class StudentAttendanceRow(CamelModel):
    name: str
    status: str
    signature: Optional[str] = None


class SessionReportRow(CamelModel):
    id: int
    start_time: datetime
    end_time: datetime
    type: str
    teacher_signature: Optional[str] = None
    location: str
    teacher_name: str
    students: List[StudentAttendanceRow]


class ReportTotals(CamelModel):
    teacher_hours: float
    student_hours: float
    expected_student_hours: float


class AttendanceReport(CamelModel):
    organization_name: str
    classroom_name: str
    teacher_name: str
    start_date: datetime
    end_date: datetime
    sessions: List[SessionReportRow]
    totals: ReportTotals
