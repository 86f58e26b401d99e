"""Per-year invoice counter row, owned by the numbering service."""

from sqlalchemy import Column, Integer, String

from backend.app.db.base_class import Base


class InvoiceCounter(Base):
    __tablename__ = "invoice_counters"

    key = Column(String(16), primary_key=True)
    count = Column(Integer, nullable=False, default=0)
