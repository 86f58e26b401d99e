"""Attendance schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict


class AttendanceCreate(BaseModel):
    status: Literal["present", "absent"]
    timestamp: Optional[datetime] = None


class AttendanceUpdate(BaseModel):
    status: Literal["present", "absent"]


class AttendanceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_id: int
    status: str
    timestamp: datetime


class AttendanceList(BaseModel):
    items: List[AttendanceRead]
    error: Optional[str] = None


class AttendanceToday(BaseModel):
    record: Optional[AttendanceRead] = None
    error: Optional[str] = None


class AttendanceSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_sessions: int = 0
    present_count: int = 0
    absent_count: int = 0
    attendance_rate: int = 0
    last_session: Optional[datetime] = None


class AttendanceSummaryReport(AttendanceSummaryRead):
    error: Optional[str] = None
