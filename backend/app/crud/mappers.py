"""Mapper functions to convert between domain entities and SQLAlchemy models."""

from datetime import datetime
from decimal import Decimal

from backend.app.core.time import as_utc
from backend.app.domain import entities as domain
from backend.app.models.attendance import AttendanceRecord as ORMAttendanceRecord
from backend.app.models.invoice import Invoice as ORMInvoice
from backend.app.models.patient import Patient as ORMPatient


def patient_to_domain(orm_patient: ORMPatient) -> domain.Patient:
    return domain.Patient(
        id=orm_patient.id,
        patient_code=orm_patient.patient_code,
        name=orm_patient.name,
        contact=orm_patient.contact or "",
        address=orm_patient.address or "",
        profile_image=orm_patient.profile_image,
        created_by=orm_patient.created_by,
        created_at=as_utc(orm_patient.created_at),
        updated_at=as_utc(orm_patient.updated_at),
    )


def attendance_to_domain(orm_record: ORMAttendanceRecord) -> domain.AttendanceRecord:
    return domain.AttendanceRecord(
        id=orm_record.id,
        patient_id=orm_record.patient_id,
        status=orm_record.status,
        timestamp=as_utc(orm_record.timestamp),
    )


def session_to_json(session: domain.InvoiceSession) -> dict:
    return {
        "date": session.date.isoformat(),
        "status": session.status,
        "timestamp": session.timestamp.isoformat(),
    }


def session_from_json(data: dict) -> domain.InvoiceSession:
    return domain.InvoiceSession(
        date=as_utc(datetime.fromisoformat(data["date"])),
        status=data["status"],
        timestamp=as_utc(datetime.fromisoformat(data["timestamp"])),
    )


def invoice_to_domain(orm_invoice: ORMInvoice) -> domain.Invoice:
    return domain.Invoice(
        id=orm_invoice.id,
        invoice_number=orm_invoice.invoice_number,
        patient_id=orm_invoice.patient_id,
        patient_name=orm_invoice.patient_name,
        patient_full_name=orm_invoice.patient_full_name,
        patient_contact=orm_invoice.patient_contact or "",
        patient_address=orm_invoice.patient_address or "",
        therapist_name=orm_invoice.therapist_name or "",
        therapist_email=orm_invoice.therapist_email or "",
        therapist_registration_number=orm_invoice.therapist_registration_number or "",
        therapist_address=orm_invoice.therapist_address or "",
        date_range=domain.DateRange(start=orm_invoice.start_date, end=orm_invoice.end_date),
        sessions=tuple(session_from_json(item) for item in orm_invoice.sessions or []),
        per_session_rate=Decimal(str(orm_invoice.per_session_rate)),
        total_sessions=orm_invoice.total_sessions,
        present_sessions=orm_invoice.present_sessions,
        total_amount=Decimal(str(orm_invoice.total_amount)),
        is_paid=bool(orm_invoice.is_paid),
        created_at=as_utc(orm_invoice.created_at),
        created_by=orm_invoice.created_by,
    )


def invoice_to_orm(invoice: domain.Invoice) -> ORMInvoice:
    return ORMInvoice(
        invoice_number=invoice.invoice_number,
        patient_id=invoice.patient_id,
        patient_name=invoice.patient_name,
        patient_full_name=invoice.patient_full_name,
        patient_contact=invoice.patient_contact,
        patient_address=invoice.patient_address,
        therapist_name=invoice.therapist_name,
        therapist_email=invoice.therapist_email,
        therapist_registration_number=invoice.therapist_registration_number,
        therapist_address=invoice.therapist_address,
        start_date=invoice.date_range.start,
        end_date=invoice.date_range.end,
        sessions=[session_to_json(s) for s in invoice.sessions],
        per_session_rate=invoice.per_session_rate,
        total_sessions=invoice.total_sessions,
        present_sessions=invoice.present_sessions,
        total_amount=invoice.total_amount,
        is_paid=invoice.is_paid,
        created_at=invoice.created_at,
        created_by=invoice.created_by,
    )
