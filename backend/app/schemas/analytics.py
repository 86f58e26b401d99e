"""Practice-wide attendance analytics schemas."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from backend.app.schemas.attendance import AttendanceSummaryRead
from backend.app.schemas.patient import PatientRead


class PatientAttendanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    patient: PatientRead
    summary: AttendanceSummaryRead


class PracticeAnalyticsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: List[PatientAttendanceRead] = []
    total_patients: int = 0
    total_sessions: int = 0
    total_present: int = 0
    total_absent: int = 0
    attendance_rate: int = 0
    error: Optional[str] = None
