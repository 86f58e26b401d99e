"""In-memory store implementations used by tests and demo mode."""

import itertools
import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from backend.app.core.errors import NotFoundError, attendance_not_found, invoice_not_found, patient_not_found
from backend.app.core.time import utc_now
from backend.app.crud.base import (
    AttendanceStore,
    CounterStore,
    InvoiceStore,
    PatientStore,
    Stores,
    sort_invoices,
)
from backend.app.domain.entities import AttendanceRecord, Invoice, Patient


class MemoryPatientStore(PatientStore):
    def __init__(
        self, clock: Callable[[], datetime] = utc_now, attendance: Optional["MemoryAttendanceStore"] = None
    ):
        self._clock = clock
        self._attendance = attendance
        self._patients: dict[int, Patient] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, patient_code, name, contact, address, profile_image=None, created_by=None) -> Patient:
        with self._lock:
            patient = Patient(
                id=next(self._ids),
                patient_code=patient_code,
                name=name,
                contact=contact,
                address=address,
                profile_image=profile_image,
                created_by=created_by,
                created_at=self._clock(),
            )
            self._patients[patient.id] = patient
        return patient

    def get(self, patient_id: int) -> Optional[Patient]:
        return self._patients.get(patient_id)

    def list_all(self) -> list[Patient]:
        by_id = sorted(self._patients.values(), key=lambda p: p.id, reverse=True)
        return sorted(by_id, key=lambda p: p.created_at, reverse=True)

    def update(self, patient_id, name=None, contact=None, address=None, profile_image=None) -> Patient:
        with self._lock:
            patient = self._patients.get(patient_id)
            if patient is None:
                raise NotFoundError(patient_not_found(patient_id))
            changes = {
                "name": name,
                "contact": contact,
                "address": address,
                "profile_image": profile_image,
            }
            patient = replace(
                patient,
                updated_at=self._clock(),
                **{field: value for field, value in changes.items() if value is not None},
            )
            self._patients[patient_id] = patient
        return patient

    def delete(self, patient_id: int) -> int:
        with self._lock:
            if self._patients.pop(patient_id, None) is None:
                raise NotFoundError(patient_not_found(patient_id))
            if self._attendance is None:
                return 0
            return self._attendance.delete_by_patient(patient_id)


class MemoryAttendanceStore(AttendanceStore):
    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._records: dict[int, AttendanceRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def list_by_patient(self, patient_id: int) -> list[AttendanceRecord]:
        records = [r for r in self._records.values() if r.patient_id == patient_id]
        return sorted(records, key=lambda r: (r.timestamp, r.id), reverse=True)

    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        return self._records.get(record_id)

    def create(self, patient_id: int, status: str, timestamp: Optional[datetime] = None) -> AttendanceRecord:
        with self._lock:
            record = AttendanceRecord(
                id=next(self._ids),
                patient_id=patient_id,
                status=status,
                timestamp=timestamp or self._clock(),
            )
            self._records[record.id] = record
        return record

    def update(self, record_id: int, status: str) -> AttendanceRecord:
        with self._lock:
            record = self._records.get(record_id)
            if record is None:
                raise NotFoundError(attendance_not_found(record_id))
            record = replace(record, status=status, timestamp=self._clock())
            self._records[record_id] = record
        return record

    def delete(self, record_id: int) -> None:
        with self._lock:
            if self._records.pop(record_id, None) is None:
                raise NotFoundError(attendance_not_found(record_id))

    def delete_by_patient(self, patient_id: int) -> int:
        with self._lock:
            doomed = [rid for rid, r in self._records.items() if r.patient_id == patient_id]
            for rid in doomed:
                del self._records[rid]
        return len(doomed)


class MemoryInvoiceStore(InvoiceStore):
    def __init__(self):
        self._invoices: dict[int, Invoice] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create(self, invoice: Invoice) -> Invoice:
        with self._lock:
            stored = replace(invoice, id=next(self._ids))
            self._invoices[stored.id] = stored
        return stored

    def get(self, invoice_id: int) -> Optional[Invoice]:
        return self._invoices.get(invoice_id)

    def list_by_patient(self, patient_id: int) -> list[Invoice]:
        return sort_invoices([inv for inv in self._invoices.values() if inv.patient_id == patient_id])

    def list_all(self) -> list[Invoice]:
        return sort_invoices(list(self._invoices.values()))

    def set_paid(self, invoice_id: int, is_paid: bool) -> None:
        with self._lock:
            invoice = self._invoices.get(invoice_id)
            if invoice is None:
                raise NotFoundError(invoice_not_found(invoice_id))
            self._invoices[invoice_id] = replace(invoice, is_paid=is_paid)

    def delete(self, invoice_id: int) -> None:
        with self._lock:
            if self._invoices.pop(invoice_id, None) is None:
                raise NotFoundError(invoice_not_found(invoice_id))


class MemoryCounterStore(CounterStore):
    def __init__(self):
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def transactional_increment(self, key: str) -> int:
        with self._lock:
            value = self._counts.get(key, 0) + 1
            self._counts[key] = value
        return value


def create_memory_stores(clock: Callable[[], datetime] = utc_now) -> Stores:
    attendance = MemoryAttendanceStore(clock=clock)
    return Stores(
        patients=MemoryPatientStore(clock=clock, attendance=attendance),
        attendance=attendance,
        invoices=MemoryInvoiceStore(),
        counters=MemoryCounterStore(),
    )


_memory_stores: Optional[Stores] = None


def get_memory_stores() -> Stores:
    """Process-wide in-memory stores for demo mode."""
    global _memory_stores
    if _memory_stores is None:
        _memory_stores = create_memory_stores()
    return _memory_stores
