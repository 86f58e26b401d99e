"""SQLAlchemy-backed invoice store."""

from dataclasses import replace
from typing import Optional

from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, invoice_not_found
from backend.app.crud.base import InvoiceStore
from backend.app.crud.mappers import invoice_to_domain, invoice_to_orm
from backend.app.crud.sql_errors import translate_db_errors
from backend.app.domain.entities import Invoice
from backend.app.models.invoice import Invoice as InvoiceModel


class SqlInvoiceStore(InvoiceStore):
    def __init__(self, db: Session):
        self.db = db

    def _get_model(self, invoice_id: int) -> InvoiceModel:
        invoice = self.db.query(InvoiceModel).filter(InvoiceModel.id == invoice_id).first()
        if invoice is None:
            raise NotFoundError(invoice_not_found(invoice_id))
        return invoice

    def _ordered(self, query):
        return query.order_by(InvoiceModel.created_at.desc(), InvoiceModel.id.asc())

    def create(self, invoice: Invoice) -> Invoice:
        with translate_db_errors(self.db, "save the invoice"):
            row = invoice_to_orm(invoice)
            self.db.add(row)
            self.db.commit()
            return replace(invoice, id=row.id)

    def get(self, invoice_id: int) -> Optional[Invoice]:
        with translate_db_errors(self.db, "load the invoice"):
            invoice = self.db.query(InvoiceModel).filter(InvoiceModel.id == invoice_id).first()
            return invoice_to_domain(invoice) if invoice else None

    def list_by_patient(self, patient_id: int) -> list[Invoice]:
        with translate_db_errors(self.db, "load invoices"):
            query = self.db.query(InvoiceModel).filter(InvoiceModel.patient_id == patient_id)
            return [invoice_to_domain(inv) for inv in self._ordered(query).all()]

    def list_all(self) -> list[Invoice]:
        with translate_db_errors(self.db, "load invoices"):
            return [invoice_to_domain(inv) for inv in self._ordered(self.db.query(InvoiceModel)).all()]

    def set_paid(self, invoice_id: int, is_paid: bool) -> None:
        with translate_db_errors(self.db, "update the paid status"):
            invoice = self._get_model(invoice_id)
            invoice.is_paid = is_paid
            self.db.commit()

    def delete(self, invoice_id: int) -> None:
        with translate_db_errors(self.db, "delete the invoice"):
            invoice = self._get_model(invoice_id)
            self.db.delete(invoice)
            self.db.commit()
