"""Abstract store interfaces.

Each store has an in-memory implementation (tests, demo mode) and a
SQLAlchemy implementation. The backend is picked once when the application is
assembled; services only ever see these interfaces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from backend.app.domain.entities import AttendanceRecord, Invoice, Patient


class PatientStore(ABC):
    @abstractmethod
    def create(
        self,
        patient_code: str,
        name: str,
        contact: str,
        address: str,
        profile_image: Optional[str] = None,
        created_by: Optional[int] = None,
    ) -> Patient:
        """Create a patient. Returns the stored patient with its ID."""

    @abstractmethod
    def get(self, patient_id: int) -> Optional[Patient]:
        """Get patient by ID."""

    @abstractmethod
    def list_all(self) -> list[Patient]:
        """List patients, newest first."""

    @abstractmethod
    def update(
        self,
        patient_id: int,
        name: Optional[str] = None,
        contact: Optional[str] = None,
        address: Optional[str] = None,
        profile_image: Optional[str] = None,
    ) -> Patient:
        """Update the given fields. Raises NotFoundError for unknown IDs."""

    @abstractmethod
    def delete(self, patient_id: int) -> int:
        """Delete a patient together with their attendance records in one step.

        Returns the number of attendance records removed. Raises NotFoundError
        for unknown IDs.
        """


class AttendanceStore(ABC):
    @abstractmethod
    def list_by_patient(self, patient_id: int) -> list[AttendanceRecord]:
        """List a patient's full attendance history, newest timestamp first."""

    @abstractmethod
    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        """Get attendance record by ID."""

    @abstractmethod
    def create(self, patient_id: int, status: str, timestamp: Optional[datetime] = None) -> AttendanceRecord:
        """Record a session. ``timestamp`` defaults to now."""

    @abstractmethod
    def update(self, record_id: int, status: str) -> AttendanceRecord:
        """Change the status and refresh the timestamp to now."""

    @abstractmethod
    def delete(self, record_id: int) -> None:
        """Hard-delete one record. Raises NotFoundError for unknown IDs."""

    @abstractmethod
    def delete_by_patient(self, patient_id: int) -> int:
        """Delete every record of a patient. Returns the number removed."""


class InvoiceStore(ABC):
    @abstractmethod
    def create(self, invoice: Invoice) -> Invoice:
        """Persist an invoice. Returns a copy carrying the assigned ID."""

    @abstractmethod
    def get(self, invoice_id: int) -> Optional[Invoice]:
        """Get invoice by ID."""

    @abstractmethod
    def list_by_patient(self, patient_id: int) -> list[Invoice]:
        """Invoices of one patient, newest ``created_at`` first, ties by ID ascending."""

    @abstractmethod
    def list_all(self) -> list[Invoice]:
        """All invoices, same ordering as ``list_by_patient``."""

    @abstractmethod
    def set_paid(self, invoice_id: int, is_paid: bool) -> None:
        """Set the paid flag without touching any other field."""

    @abstractmethod
    def delete(self, invoice_id: int) -> None:
        """Hard-delete an invoice. Attendance records are not affected."""


class CounterStore(ABC):
    @abstractmethod
    def transactional_increment(self, key: str) -> int:
        """Atomically add one to the counter ``key`` and return the new value.

        A missing counter starts at zero, so the first call returns 1.
        """


@dataclass
class Stores:
    """The set of stores a request works against."""

    patients: PatientStore
    attendance: AttendanceStore
    invoices: InvoiceStore
    counters: CounterStore


def sort_invoices(invoices: list[Invoice]) -> list[Invoice]:
    """Newest ``created_at`` first; equal timestamps keep ID ascending."""
    by_id = sorted(invoices, key=lambda inv: inv.id or 0)
    return sorted(by_id, key=lambda inv: inv.created_at, reverse=True)
