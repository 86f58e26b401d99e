"""Attendance marking rules and attendance summaries."""

from datetime import UTC, datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from backend.app.core.errors import ValidationError
from backend.app.core.time import as_utc, end_of_day, local_date, start_of_day
from backend.app.crud.base import AttendanceStore
from backend.app.domain.entities import (
    ABSENT,
    ATTENDANCE_STATUSES,
    PRESENT,
    AttendanceRecord,
    AttendanceSummary,
    DateRange,
    Patient,
    PatientAttendance,
    PracticeAnalytics,
)


def validate_status(status: str) -> str:
    normalized = (status or "").strip().lower()
    if normalized not in ATTENDANCE_STATUSES:
        raise ValidationError("Status must be 'present' or 'absent'", field="status")
    return normalized


def validate_session_timestamp(timestamp: Optional[datetime], now: datetime) -> Optional[datetime]:
    """Backdated sessions are allowed; sessions in the future are not."""
    if timestamp is None:
        return None
    timestamp = as_utc(timestamp)
    if timestamp > now:
        raise ValidationError("Attendance cannot be marked for a future date", field="timestamp")
    return timestamp


def validate_date_range(date_range: DateRange) -> None:
    if date_range.start is None or date_range.end is None:
        raise ValidationError("Both start and end dates are required", field="date_range")
    if date_range.end < date_range.start:
        raise ValidationError("End date cannot be before start date", field="end_date")


def filter_records_in_range(
    records: Iterable[AttendanceRecord], date_range: DateRange, tz: tzinfo = UTC
) -> List[AttendanceRecord]:
    """Records whose timestamp lies within the inclusive calendar-day range."""
    lower = start_of_day(date_range.start, tz)
    upper = end_of_day(date_range.end, tz)
    return [record for record in records if lower <= as_utc(record.timestamp) <= upper]


def attendance_rate(present_count: int, total_sessions: int) -> int:
    """Whole percentage of present sessions, rounded half-up; 0 when empty."""
    if total_sessions <= 0:
        return 0
    rate = Decimal(present_count) * 100 / Decimal(total_sessions)
    return int(rate.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def summarize_attendance(
    records: Iterable[AttendanceRecord],
    date_range: Optional[DateRange] = None,
    tz: tzinfo = UTC,
) -> AttendanceSummary:
    selected = list(records)
    if date_range is not None:
        selected = filter_records_in_range(selected, date_range, tz)
    present_count = sum(1 for record in selected if record.status == PRESENT)
    absent_count = sum(1 for record in selected if record.status == ABSENT)
    total = len(selected)
    last_session = max((as_utc(record.timestamp) for record in selected), default=None)
    return AttendanceSummary(
        total_sessions=total,
        present_count=present_count,
        absent_count=absent_count,
        attendance_rate=attendance_rate(present_count, total),
        last_session=last_session,
    )


def find_today_record(
    records: Iterable[AttendanceRecord], now: datetime, tz: tzinfo = UTC
) -> Optional[AttendanceRecord]:
    """Newest record on the same calendar day as ``now``; the one edited in place."""
    today = local_date(now, tz)
    todays = [record for record in records if local_date(record.timestamp, tz) == today]
    if not todays:
        return None
    return max(todays, key=lambda record: (as_utc(record.timestamp), record.id))


def build_practice_analytics(
    patients: Iterable[Patient],
    attendance_store: AttendanceStore,
    date_range: Optional[DateRange] = None,
    tz: tzinfo = UTC,
) -> PracticeAnalytics:
    """Per-patient summaries, lowest attendance rate first, plus practice totals."""
    rows = [
        PatientAttendance(
            patient=patient,
            summary=summarize_attendance(attendance_store.list_by_patient(patient.id), date_range, tz),
        )
        for patient in patients
    ]
    rows.sort(key=lambda row: (row.summary.attendance_rate, row.patient.name.lower(), row.patient.id))

    total_sessions = sum(row.summary.total_sessions for row in rows)
    total_present = sum(row.summary.present_count for row in rows)
    total_absent = sum(row.summary.absent_count for row in rows)
    return PracticeAnalytics(
        patients=tuple(rows),
        total_patients=len(rows),
        total_sessions=total_sessions,
        total_present=total_present,
        total_absent=total_absent,
        attendance_rate=attendance_rate(total_present, total_sessions),
    )
