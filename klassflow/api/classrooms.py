# klassflow/api/classrooms.py
from datetime import datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from klassflow.api.deps import ensure_same_organization, get_db, require_staff
from klassflow.core.clock import utcnow
from klassflow.core.reports import build_attendance_report
from klassflow.crud import classroom as crud_classroom
from klassflow.db.models.user import User
from klassflow.schemas.report import AttendanceReport

router = APIRouter()


@router.get("/{classroom_id}/attendance", response_model=AttendanceReport)
def get_attendance_report(
    classroom_id: int,
    range_name: Literal["week", "month"] = Query("week", alias="range"),
    date: Optional[datetime] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    classroom = crud_classroom.get_classroom(db, classroom_id)
    if not classroom:
        raise HTTPException(status_code=404, detail="Classroom not found")
    ensure_same_organization(current_user, classroom.organization_id)

    if date is None:
        reference = utcnow()
    elif date.tzinfo is not None:
        reference = date.astimezone(timezone.utc).replace(tzinfo=None)
    else:
        reference = date
    return build_attendance_report(db, classroom, range_name, reference)
