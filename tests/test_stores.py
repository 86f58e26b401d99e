from datetime import UTC, date, datetime, timedelta
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from backend.app.core.errors import NotFoundError, StoreUnavailable
from backend.app.crud import create_sql_stores
from backend.app.crud.memory import create_memory_stores
from backend.app.db.base import Base
from backend.app.db.session import SessionLocal, engine
from backend.app.domain.entities import ABSENT, PRESENT, DateRange, Invoice, InvoiceSession
from backend.app.services.patients import remove_patient

T0 = datetime(2026, 6, 1, 9, 0, tzinfo=UTC)


class Clock:
    def __init__(self, start):
        self.value = start

    def __call__(self):
        return self.value


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(params=["memory", "sql"])
def stores(request):
    if request.param == "memory":
        yield create_memory_stores(clock=Clock(T0))
        return
    db = SessionLocal()
    try:
        yield create_sql_stores(db)
    finally:
        db.close()


def make_invoice(number, patient_id, created_at, name="Ravi"):
    when = datetime(2026, 5, 3, 10, tzinfo=UTC)
    return Invoice(
        invoice_number=number,
        patient_id=patient_id,
        patient_name=name,
        patient_full_name=f"{name} Kumar",
        patient_contact="98450",
        patient_address="MG Road",
        therapist_name="Dr. Iyer",
        therapist_email="iyer@example.com",
        therapist_registration_number="",
        therapist_address="",
        date_range=DateRange(start=date(2026, 5, 1), end=date(2026, 5, 31)),
        sessions=(InvoiceSession(date=when, status=PRESENT, timestamp=when),),
        per_session_rate=Decimal("650.00"),
        total_sessions=2,
        present_sessions=1,
        total_amount=Decimal("650.00"),
        is_paid=False,
        created_at=created_at,
        created_by=None,
    )


def test_patient_crud(stores):
    patient = stores.patients.create("PT-100000-AAAA", "Ravi", "98450", "MG Road")
    assert stores.patients.get(patient.id).patient_code == "PT-100000-AAAA"

    updated = stores.patients.update(patient.id, contact="11111")
    assert updated.contact == "11111"
    assert updated.name == "Ravi"

    stores.patients.delete(patient.id)
    assert stores.patients.get(patient.id) is None
    with pytest.raises(NotFoundError):
        stores.patients.delete(patient.id)


def test_patient_delete_takes_attendance_with_it(stores):
    patient = stores.patients.create("PT-100001-AAAB", "Ravi", "98450", "MG Road")
    other = stores.patients.create("PT-100002-AAAC", "Meena", "98451", "MG Road")
    stores.attendance.create(patient.id, PRESENT, T0)
    stores.attendance.create(patient.id, ABSENT, T0 + timedelta(days=1))
    stores.attendance.create(other.id, PRESENT, T0)

    assert stores.patients.delete(patient.id) == 2
    assert stores.attendance.list_by_patient(patient.id) == []
    assert len(stores.attendance.list_by_patient(other.id)) == 1


def test_failed_patient_delete_keeps_attendance_history(monkeypatch):
    db = SessionLocal()
    try:
        stores = create_sql_stores(db)
        patient = stores.patients.create("PT-100003-AAAD", "Ravi", "98450", "MG Road")
        stores.attendance.create(patient.id, PRESENT, T0)
        stores.attendance.create(patient.id, PRESENT, T0 + timedelta(days=1))

        def refuse(instance):
            raise OperationalError("DELETE FROM patients", {}, Exception("database is locked"))

        monkeypatch.setattr(db, "delete", refuse)
        with pytest.raises(StoreUnavailable):
            remove_patient(stores, patient.id)
        monkeypatch.undo()

        assert stores.patients.get(patient.id) is not None
        assert len(stores.attendance.list_by_patient(patient.id)) == 2
    finally:
        db.close()


def test_attendance_listed_newest_first(stores):
    patient = stores.patients.create("PT-100001-AAAA", "Ravi", "", "")
    older = stores.attendance.create(patient.id, PRESENT, T0 - timedelta(days=2))
    newer = stores.attendance.create(patient.id, ABSENT, T0 - timedelta(days=1))
    assert [r.id for r in stores.attendance.list_by_patient(patient.id)] == [newer.id, older.id]


def test_attendance_edit_refreshes_timestamp(stores):
    patient = stores.patients.create("PT-100002-AAAA", "Ravi", "", "")
    record = stores.attendance.create(patient.id, PRESENT, T0 - timedelta(days=5))
    edited = stores.attendance.update(record.id, ABSENT)
    assert edited.status == ABSENT
    assert edited.timestamp > record.timestamp


def test_attendance_delete_and_missing_ids(stores):
    patient = stores.patients.create("PT-100003-AAAA", "Ravi", "", "")
    record = stores.attendance.create(patient.id, PRESENT, T0)
    stores.attendance.delete(record.id)
    assert stores.attendance.get(record.id) is None
    with pytest.raises(NotFoundError):
        stores.attendance.delete(record.id)
    with pytest.raises(NotFoundError):
        stores.attendance.update(record.id, PRESENT)


def test_delete_by_patient_only_touches_that_patient(stores):
    first = stores.patients.create("PT-100004-AAAA", "Ravi", "", "")
    second = stores.patients.create("PT-100005-AAAA", "Asha", "", "")
    stores.attendance.create(first.id, PRESENT, T0)
    stores.attendance.create(first.id, ABSENT, T0)
    stores.attendance.create(second.id, PRESENT, T0)
    assert stores.attendance.delete_by_patient(first.id) == 2
    assert stores.attendance.list_by_patient(first.id) == []
    assert len(stores.attendance.list_by_patient(second.id)) == 1


def test_invoice_round_trip_keeps_money_and_sessions(stores):
    created = stores.invoices.create(make_invoice("INV-2026-001", 7, T0))
    fetched = stores.invoices.get(created.id)
    assert fetched == created
    assert fetched.per_session_rate == Decimal("650.00")
    assert fetched.sessions[0].timestamp == datetime(2026, 5, 3, 10, tzinfo=UTC)


def test_invoice_ordering_newest_first_ties_by_id(stores):
    a = stores.invoices.create(make_invoice("INV-2026-001", 1, T0))
    b = stores.invoices.create(make_invoice("INV-2026-002", 2, T0 + timedelta(hours=1)))
    c = stores.invoices.create(make_invoice("INV-2026-003", 1, T0))
    assert [inv.id for inv in stores.invoices.list_all()] == [b.id, a.id, c.id]
    assert [inv.id for inv in stores.invoices.list_by_patient(1)] == [a.id, c.id]


def test_set_paid_changes_only_the_flag(stores):
    a = stores.invoices.create(make_invoice("INV-2026-001", 1, T0))
    b = stores.invoices.create(make_invoice("INV-2026-002", 1, T0))
    stores.invoices.set_paid(a.id, True)
    paid = stores.invoices.get(a.id)
    assert paid.is_paid is True
    assert paid.total_amount == a.total_amount
    assert paid.invoice_number == a.invoice_number
    assert stores.invoices.get(b.id) == b
    stores.invoices.set_paid(a.id, False)
    assert stores.invoices.get(a.id) == a


def test_invoice_delete_keeps_attendance(stores):
    patient = stores.patients.create("PT-100006-AAAA", "Ravi", "", "")
    stores.attendance.create(patient.id, PRESENT, T0)
    invoice = stores.invoices.create(make_invoice("INV-2026-001", patient.id, T0))
    stores.invoices.delete(invoice.id)
    assert stores.invoices.get(invoice.id) is None
    assert len(stores.attendance.list_by_patient(patient.id)) == 1
    with pytest.raises(NotFoundError):
        stores.invoices.set_paid(invoice.id, True)


def test_counter_increments_per_key(stores):
    assert stores.counters.transactional_increment("2026") == 1
    assert stores.counters.transactional_increment("2026") == 2
    assert stores.counters.transactional_increment("2025") == 1
