"""Store implementations and their assembly."""

from sqlalchemy.orm import Session

from backend.app.crud.base import AttendanceStore, CounterStore, InvoiceStore, PatientStore, Stores
from backend.app.crud.crud_attendance import SqlAttendanceStore
from backend.app.crud.crud_invoice import SqlInvoiceStore
from backend.app.crud.crud_invoice_counter import SqlCounterStore
from backend.app.crud.crud_patient import SqlPatientStore


def create_sql_stores(db: Session, session_factory=None) -> Stores:
    """Stores bound to a request session; counters use their own sessions."""
    if session_factory is None:
        from backend.app.db.session import SessionLocal

        session_factory = SessionLocal
    return Stores(
        patients=SqlPatientStore(db),
        attendance=SqlAttendanceStore(db),
        invoices=SqlInvoiceStore(db),
        counters=SqlCounterStore(session_factory),
    )


__all__ = [
    "AttendanceStore",
    "CounterStore",
    "InvoiceStore",
    "PatientStore",
    "Stores",
    "create_sql_stores",
]
