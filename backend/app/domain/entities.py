"""Domain entities for PhysioDesk.

Plain frozen dataclasses, independent of the ORM, so the in-memory and the
SQLAlchemy stores hand the services identical objects.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

PRESENT = "present"
ABSENT = "absent"
ATTENDANCE_STATUSES = (PRESENT, ABSENT)


@dataclass(frozen=True)
class Patient:
    id: int
    patient_code: str
    name: str
    contact: str
    address: str
    profile_image: Optional[str]
    created_by: Optional[int]
    created_at: datetime
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceRecord:
    id: int
    patient_id: int
    status: str
    timestamp: datetime


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar-day range."""

    start: date
    end: date


@dataclass(frozen=True)
class InvoiceSession:
    """Billed session copied from an attendance record.

    ``date`` and ``timestamp`` hold the same instant; the renderer reads
    ``date``.
    """

    date: datetime
    status: str
    timestamp: datetime


@dataclass(frozen=True)
class PatientSnapshot:
    """Patient identity as it stood when an invoice was issued."""

    patient_id: int
    name: str
    contact: str
    address: str

    @classmethod
    def from_patient(cls, patient: Patient) -> "PatientSnapshot":
        return cls(
            patient_id=patient.id,
            name=patient.name,
            contact=patient.contact or "",
            address=patient.address or "",
        )


@dataclass(frozen=True)
class TherapistSnapshot:
    """Therapist identity as it stood when an invoice was issued."""

    name: str
    email: str
    registration_number: str = ""
    address: str = ""


@dataclass(frozen=True)
class Invoice:
    invoice_number: str
    patient_id: int
    patient_name: str
    patient_full_name: str
    patient_contact: str
    patient_address: str
    therapist_name: str
    therapist_email: str
    therapist_registration_number: str
    therapist_address: str
    date_range: DateRange
    sessions: tuple[InvoiceSession, ...]
    per_session_rate: Decimal
    total_sessions: int
    present_sessions: int
    total_amount: Decimal
    is_paid: bool
    created_at: datetime
    created_by: Optional[int]
    id: Optional[int] = None


@dataclass(frozen=True)
class AttendanceSummary:
    total_sessions: int
    present_count: int
    absent_count: int
    attendance_rate: int
    last_session: Optional[datetime] = None


@dataclass(frozen=True)
class PatientAttendance:
    patient: Patient
    summary: AttendanceSummary


@dataclass(frozen=True)
class PracticeAnalytics:
    patients: tuple[PatientAttendance, ...]
    total_patients: int
    total_sessions: int
    total_present: int
    total_absent: int
    attendance_rate: int
