"""Assemble invoices from a patient's attendance history."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable, Iterable, Optional

from backend.app.core.errors import PersistenceFailed, StoreUnavailable, ValidationError
from backend.app.core.time import as_utc, utc_now
from backend.app.crud.base import AttendanceStore, InvoiceStore
from backend.app.domain.entities import (
    PRESENT,
    AttendanceRecord,
    DateRange,
    Invoice,
    InvoiceSession,
    PatientSnapshot,
    TherapistSnapshot,
)
from backend.app.services.attendance import filter_records_in_range, validate_date_range
from backend.app.services.numbering import InvoiceNumberingService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


@dataclass(frozen=True)
class InvoiceTotals:
    total_sessions: int
    present_sessions: int
    sessions: tuple
    total_amount: Decimal


def to_rate(value) -> Decimal:
    try:
        rate = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError("Per-session rate must be a number", field="per_session_rate") from exc
    if not rate.is_finite():
        raise ValidationError("Per-session rate must be a number", field="per_session_rate")
    rate = rate.quantize(CENTS, rounding=ROUND_HALF_UP)
    if rate <= 0:
        raise ValidationError("Per-session rate must be greater than zero", field="per_session_rate")
    return rate


def summarize_for_invoice(records: Iterable[AttendanceRecord], per_session_rate: Decimal) -> InvoiceTotals:
    """Counts every selected record, bills and lists only the present ones."""
    selected = list(records)
    present = sorted(
        (record for record in selected if record.status == PRESENT),
        key=lambda record: (as_utc(record.timestamp), record.id),
    )
    sessions = tuple(
        InvoiceSession(date=as_utc(record.timestamp), status=record.status, timestamp=as_utc(record.timestamp))
        for record in present
    )
    return InvoiceTotals(
        total_sessions=len(selected),
        present_sessions=len(present),
        sessions=sessions,
        total_amount=(len(present) * per_session_rate).quantize(CENTS),
    )


def therapist_snapshot_from_user(user) -> TherapistSnapshot:
    """Identity of the acting therapist; blank profile fields stay blank."""
    email = user.email or ""
    name = (getattr(user, "display_name", None) or "").strip() or email.split("@")[0]
    return TherapistSnapshot(
        name=name,
        email=email,
        registration_number=(getattr(user, "registration_number", None) or "").strip(),
        address=(getattr(user, "address", None) or "").strip(),
    )


@dataclass(frozen=True)
class RevenueSummary:
    invoice_count: int
    paid_count: int
    total_revenue: Decimal
    paid_revenue: Decimal
    unpaid_revenue: Decimal


def filter_invoices(
    invoices: Iterable[Invoice], search: Optional[str] = None, is_paid: Optional[bool] = None
) -> list[Invoice]:
    """Keep invoices whose patient name, billed name or number contains ``search``, ignoring case."""
    term = (search or "").strip().lower()
    matched = []
    for invoice in invoices:
        if is_paid is not None and invoice.is_paid != is_paid:
            continue
        haystack = (invoice.patient_name, invoice.patient_full_name, invoice.invoice_number)
        if term and not any(term in (value or "").lower() for value in haystack):
            continue
        matched.append(invoice)
    return matched


def summarize_revenue(invoices: Iterable[Invoice]) -> RevenueSummary:
    invoices = list(invoices)
    total = sum((invoice.total_amount for invoice in invoices), Decimal("0")).quantize(CENTS)
    paid = [invoice for invoice in invoices if invoice.is_paid]
    paid_total = sum((invoice.total_amount for invoice in paid), Decimal("0")).quantize(CENTS)
    return RevenueSummary(
        invoice_count=len(invoices),
        paid_count=len(paid),
        total_revenue=total,
        paid_revenue=paid_total,
        unpaid_revenue=total - paid_total,
    )


class InvoiceAggregator:
    """Builds, numbers and stores an invoice in one call.

    The number is allocated before the invoice is saved. If the save fails the
    number stays consumed and is reported on the raised ``PersistenceFailed``.
    """

    def __init__(
        self,
        attendance_store: AttendanceStore,
        invoice_store: InvoiceStore,
        numbering: InvoiceNumberingService,
        clock: Callable[[], datetime] = utc_now,
        tz: tzinfo = UTC,
    ):
        self.attendance_store = attendance_store
        self.invoice_store = invoice_store
        self.numbering = numbering
        self.clock = clock
        self.tz = tz

    def build_invoice(
        self,
        patient: PatientSnapshot,
        therapist: TherapistSnapshot,
        date_range: DateRange,
        full_name: str,
        per_session_rate,
        created_by: Optional[int] = None,
    ) -> Invoice:
        validate_date_range(date_range)
        rate = to_rate(per_session_rate)
        full_name = (full_name or "").strip()
        if not full_name:
            raise ValidationError("Full name is required", field="full_name")

        history = self.attendance_store.list_by_patient(patient.patient_id)
        in_range = filter_records_in_range(history, date_range, self.tz)
        totals = summarize_for_invoice(in_range, rate)
        if totals.present_sessions == 0:
            logger.info("Invoice for patient %s covers no attended sessions", patient.patient_id)

        invoice_number = self.numbering.next_invoice_number()

        invoice = Invoice(
            invoice_number=invoice_number,
            patient_id=patient.patient_id,
            patient_name=patient.name,
            patient_full_name=full_name,
            patient_contact=patient.contact,
            patient_address=patient.address,
            therapist_name=therapist.name,
            therapist_email=therapist.email,
            therapist_registration_number=therapist.registration_number,
            therapist_address=therapist.address,
            date_range=DateRange(start=date_range.start, end=date_range.end),
            sessions=totals.sessions,
            per_session_rate=rate,
            total_sessions=totals.total_sessions,
            present_sessions=totals.present_sessions,
            total_amount=totals.total_amount,
            is_paid=False,
            created_at=self.clock(),
            created_by=created_by,
        )

        try:
            stored = self.invoice_store.create(invoice)
        except StoreUnavailable as exc:
            logger.warning(
                "Invoice number %s burned: save failed for patient %s", invoice_number, patient.patient_id
            )
            raise PersistenceFailed(
                f"Invoice {invoice_number} could not be saved. The number will not be reused.",
                invoice_number=invoice_number,
            ) from exc
        logger.info("Issued invoice %s for patient %s", stored.invoice_number, stored.patient_id)
        return stored

