"""Request-scoped access to the stores and the services built on them.

``get_stores`` serves SQLAlchemy-backed stores. When the application runs in
memory mode, ``main`` overrides it with ``get_memory_stores`` once at start-up.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from backend.app.core.time import practice_timezone, utc_now
from backend.app.crud import Stores, create_sql_stores
from backend.app.db.session import get_db
from backend.app.services.invoices import InvoiceAggregator
from backend.app.services.numbering import InvoiceNumberingService


def get_stores(db: Session = Depends(get_db)) -> Stores:
    return create_sql_stores(db)


def get_numbering_service(stores: Stores = Depends(get_stores)) -> InvoiceNumberingService:
    return InvoiceNumberingService(stores.counters, clock=utc_now, tz=practice_timezone())


def get_invoice_aggregator(
    stores: Stores = Depends(get_stores),
    numbering: InvoiceNumberingService = Depends(get_numbering_service),
) -> InvoiceAggregator:
    return InvoiceAggregator(
        attendance_store=stores.attendance,
        invoice_store=stores.invoices,
        numbering=numbering,
        clock=utc_now,
        tz=practice_timezone(),
    )
