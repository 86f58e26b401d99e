from dataclasses import replace
from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from backend.app.core.errors import PersistenceFailed, StoreUnavailable, ValidationError
from backend.app.crud.memory import MemoryInvoiceStore, create_memory_stores
from backend.app.domain.entities import ABSENT, PRESENT, DateRange, PatientSnapshot, TherapistSnapshot
from backend.app.services.invoices import (
    InvoiceAggregator,
    filter_invoices,
    summarize_for_invoice,
    summarize_revenue,
    therapist_snapshot_from_user,
)
from backend.app.services.numbering import InvoiceNumberingService
from backend.app.services.patients import register_patient

NOW = datetime(2026, 3, 31, 12, 0, tzinfo=UTC)
MARCH = DateRange(start=date(2026, 3, 1), end=date(2026, 3, 31))
THERAPIST = TherapistSnapshot(name="Dr. Meera Iyer", email="meera@example.com", registration_number="KPC-1")


class FailingInvoiceStore(MemoryInvoiceStore):
    def __init__(self):
        super().__init__()
        self.fail_next = True

    def create(self, invoice):
        if self.fail_next:
            self.fail_next = False
            raise StoreUnavailable("invoice store offline")
        return super().create(invoice)


def make_aggregator(stores, invoice_store=None, tz=UTC):
    numbering = InvoiceNumberingService(stores.counters, clock=lambda: NOW, tz=tz)
    return InvoiceAggregator(
        attendance_store=stores.attendance,
        invoice_store=invoice_store or stores.invoices,
        numbering=numbering,
        clock=lambda: NOW,
        tz=tz,
    )


@pytest.fixture
def stores():
    return create_memory_stores(clock=lambda: NOW)


@pytest.fixture
def patient(stores):
    return register_patient(stores, name="Ravi Kumar", contact="98450 00000", address="MG Road", code_factory=lambda: "PT-000001-ABCD")


def build(aggregator, patient, date_range=MARCH, rate=500, full_name="Ravi S. Kumar"):
    return aggregator.build_invoice(
        patient=PatientSnapshot.from_patient(patient),
        therapist=THERAPIST,
        date_range=date_range,
        full_name=full_name,
        per_session_rate=rate,
        created_by=1,
    )


def test_present_absent_present_bills_two_sessions(stores, patient):
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 2, 10, tzinfo=UTC))
    stores.attendance.create(patient.id, ABSENT, datetime(2026, 3, 3, 10, tzinfo=UTC))
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 4, 10, tzinfo=UTC))

    invoice = build(make_aggregator(stores), patient)

    assert invoice.present_sessions == 2
    assert invoice.total_sessions == 3
    assert invoice.total_amount == Decimal("1000")
    assert len(invoice.sessions) == 2
    assert all(session.status == PRESENT for session in invoice.sessions)
    assert [s.date for s in invoice.sessions] == [s.timestamp for s in invoice.sessions]


def test_returned_invoice_is_complete_and_stored(stores, patient):
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 2, 10, tzinfo=UTC))
    invoice = build(make_aggregator(stores), patient)

    assert invoice.id is not None
    assert invoice.invoice_number == "INV-2026-001"
    assert invoice.is_paid is False
    assert invoice.created_at == NOW
    assert invoice.patient_full_name == "Ravi S. Kumar"
    assert invoice.therapist_registration_number == "KPC-1"
    assert stores.invoices.get(invoice.id) == invoice


def test_end_of_day_boundary_is_inclusive(stores, patient):
    end = datetime(2026, 3, 31, 23, 59, 59, 999999, tzinfo=UTC)
    stores.attendance.create(patient.id, PRESENT, end)
    stores.attendance.create(patient.id, PRESENT, end + timedelta(microseconds=1))
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 1, 0, 0, tzinfo=UTC))
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 1, tzinfo=UTC) - timedelta(microseconds=1))

    invoice = build(make_aggregator(stores), patient)

    assert invoice.present_sessions == 2
    assert end in [s.timestamp for s in invoice.sessions]


def test_day_boundaries_follow_practice_timezone(stores, patient):
    ist = timezone(timedelta(hours=5, minutes=30))
    # 20:00 UTC on 31 March is already 1 April in India
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 31, 20, 0, tzinfo=UTC))
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 2, 28, 19, 0, tzinfo=UTC))

    invoice = build(make_aggregator(stores, tz=ist), patient)

    assert invoice.present_sessions == 1
    assert invoice.sessions[0].timestamp == datetime(2026, 2, 28, 19, 0, tzinfo=UTC)


def test_empty_range_yields_zero_value_invoice(stores, patient):
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 1, 10, tzinfo=UTC))

    invoice = build(make_aggregator(stores), patient)

    assert invoice.total_sessions == 0
    assert invoice.present_sessions == 0
    assert invoice.total_amount == 0
    assert invoice.sessions == ()
    assert invoice.invoice_number == "INV-2026-001"


def test_sessions_listed_oldest_first():
    records = []
    stores = create_memory_stores(clock=lambda: NOW)
    for day in (9, 3, 6):
        records.append(stores.attendance.create(7, PRESENT, datetime(2026, 3, day, tzinfo=UTC)))
    totals = summarize_for_invoice(records, Decimal("750.50"))
    assert [s.date.day for s in totals.sessions] == [3, 6, 9]
    assert totals.total_amount == Decimal("2251.50")


@pytest.mark.parametrize(
    "date_range, rate, full_name, field",
    [
        (DateRange(start=date(2026, 3, 10), end=date(2026, 3, 9)), 500, "Ravi", "end_date"),
        (MARCH, 0, "Ravi", "per_session_rate"),
        (MARCH, -20, "Ravi", "per_session_rate"),
        (MARCH, "abc", "Ravi", "per_session_rate"),
        (MARCH, 500, "  ", "full_name"),
    ],
)
def test_preconditions_fail_before_any_number_is_used(stores, patient, date_range, rate, full_name, field):
    aggregator = make_aggregator(stores)
    with pytest.raises(ValidationError) as excinfo:
        build(aggregator, patient, date_range=date_range, rate=rate, full_name=full_name)
    assert excinfo.value.field == field
    assert build(aggregator, patient).invoice_number == "INV-2026-001"


def test_failed_save_burns_the_number(stores, patient):
    failing = FailingInvoiceStore()
    aggregator = make_aggregator(stores, invoice_store=failing)

    with pytest.raises(PersistenceFailed) as excinfo:
        build(aggregator, patient)
    assert excinfo.value.invoice_number == "INV-2026-001"
    assert failing.list_all() == []

    retry = build(aggregator, patient)
    assert retry.invoice_number == "INV-2026-002"


def test_failed_save_logs_burned_number(stores, patient, caplog):
    aggregator = make_aggregator(stores, invoice_store=FailingInvoiceStore())
    with caplog.at_level("WARNING", logger="backend.app.services.invoices"):
        with pytest.raises(PersistenceFailed):
            build(aggregator, patient)
    assert "INV-2026-001" in caplog.text


def test_patient_edits_do_not_reach_issued_invoices(stores, patient):
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 2, tzinfo=UTC))
    invoice = build(make_aggregator(stores), patient)

    stores.patients.update(patient.id, name="Ravi Renamed", contact="000", address="Elsewhere")

    stored = stores.invoices.get(invoice.id)
    assert stored.patient_name == "Ravi Kumar"
    assert stored.patient_contact == "98450 00000"
    assert stored.patient_address == "MG Road"


def test_marking_paid_touches_only_that_flag(stores, patient):
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 2, tzinfo=UTC))
    aggregator = make_aggregator(stores)
    first = build(aggregator, patient)
    second = build(aggregator, patient)

    stores.invoices.set_paid(first.id, True)
    stores.invoices.set_paid(first.id, True)

    updated = stores.invoices.get(first.id)
    assert updated.is_paid is True
    assert updated == replace(first, is_paid=True)
    assert stores.invoices.get(second.id) == second


def test_therapist_snapshot_falls_back_to_email_prefix():
    class Account:
        email = "meera@example.com"
        display_name = None
        registration_number = None
        address = "  "

    snapshot = therapist_snapshot_from_user(Account())
    assert snapshot.name == "meera"
    assert snapshot.registration_number == ""
    assert snapshot.address == ""


def test_revenue_totals_and_filters(stores, patient):
    stores.attendance.create(patient.id, PRESENT, datetime(2026, 3, 2, 10, tzinfo=UTC))
    aggregator = make_aggregator(stores)
    first = build(aggregator, patient, rate="333.33")
    second = build(aggregator, patient, rate=500)
    stores.invoices.set_paid(first.id, True)
    invoices = stores.invoices.list_all()

    revenue = summarize_revenue(invoices)
    assert revenue.invoice_count == 2
    assert revenue.paid_count == 1
    assert revenue.total_revenue == Decimal("833.33")
    assert revenue.paid_revenue == Decimal("333.33")
    assert revenue.unpaid_revenue == Decimal("500.00")

    assert [inv.id for inv in filter_invoices(invoices, is_paid=False)] == [second.id]
    assert {inv.id for inv in filter_invoices(invoices, search="ravi s.")} == {first.id, second.id}
    assert filter_invoices(invoices, search="nobody") == []
    assert summarize_revenue([]).total_revenue == Decimal("0.00")
