"""Invoice routes: issue, list, mark paid, delete and download."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from backend.app.core.errors import StoreUnavailable, invoice_not_found
from backend.app.core.security import get_current_user
from backend.app.core.time import practice_timezone
from backend.app.crud import Stores
from backend.app.dependencies.stores import get_invoice_aggregator, get_stores
from backend.app.domain.entities import DateRange, PatientSnapshot
from backend.app.models.user import User
from backend.app.schemas.invoice import (
    InvoiceCreate,
    InvoiceCreated,
    InvoiceList,
    InvoicePaidUpdate,
    InvoiceRead,
    PracticeInvoiceList,
)
from backend.app.services.invoice_renderer import invoice_filename, render_invoice_pdf
from backend.app.services.invoices import (
    InvoiceAggregator,
    filter_invoices,
    summarize_revenue,
    therapist_snapshot_from_user,
)
from backend.app.services.patients import get_patient_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=["invoices"])


def _get_invoice(stores: Stores, invoice_id: int):
    invoice = stores.invoices.get(invoice_id)
    if invoice is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=invoice_not_found(invoice_id))
    return invoice


def _invoice_list(load) -> InvoiceList:
    try:
        invoices = load()
    except StoreUnavailable as exc:
        return InvoiceList(items=[], error=exc.message)
    return InvoiceList.model_validate({"items": invoices}, from_attributes=True)


@router.post(
    "/patients/{patient_id}/invoices", response_model=InvoiceCreated, status_code=status.HTTP_201_CREATED
)
async def create_invoice(
    patient_id: int,
    payload: InvoiceCreate,
    stores: Stores = Depends(get_stores),
    aggregator: InvoiceAggregator = Depends(get_invoice_aggregator),
    current_user: User = Depends(get_current_user),
):
    patient = get_patient_or_404(stores, patient_id)
    invoice = aggregator.build_invoice(
        patient=PatientSnapshot.from_patient(patient),
        therapist=therapist_snapshot_from_user(current_user),
        date_range=DateRange(start=payload.start_date, end=payload.end_date),
        full_name=payload.full_name,
        per_session_rate=payload.per_session_rate,
        created_by=current_user.id,
    )
    read = InvoiceRead.model_validate(invoice, from_attributes=True)
    return InvoiceCreated(**read.model_dump(), document_url=f"/invoices/{invoice.id}/document")


@router.get("/patients/{patient_id}/invoices", response_model=InvoiceList)
async def list_patient_invoices(
    patient_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    return _invoice_list(lambda: stores.invoices.list_by_patient(patient_id))


@router.get("/invoices", response_model=PracticeInvoiceList)
async def list_invoices(
    search: Optional[str] = None,
    paid: Optional[bool] = None,
    stores: Stores = Depends(get_stores),
    current_user: User = Depends(get_current_user),
):
    """All invoices matching the filters. Revenue totals cover every invoice."""
    try:
        invoices = stores.invoices.list_all()
    except StoreUnavailable as exc:
        return PracticeInvoiceList(items=[], error=exc.message)
    return PracticeInvoiceList.model_validate(
        {"items": filter_invoices(invoices, search, paid), "revenue": summarize_revenue(invoices)},
        from_attributes=True,
    )


@router.get("/invoices/{invoice_id}", response_model=InvoiceRead)
async def get_invoice(
    invoice_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    return _get_invoice(stores, invoice_id)


@router.patch("/invoices/{invoice_id}/paid", response_model=InvoiceRead)
async def set_invoice_paid(
    invoice_id: int,
    payload: InvoicePaidUpdate,
    stores: Stores = Depends(get_stores),
    current_user: User = Depends(get_current_user),
):
    _get_invoice(stores, invoice_id)
    stores.invoices.set_paid(invoice_id, payload.is_paid)
    return _get_invoice(stores, invoice_id)


@router.delete("/invoices/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice(
    invoice_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    _get_invoice(stores, invoice_id)
    stores.invoices.delete(invoice_id)
    logger.info("Deleted invoice %s", invoice_id)


@router.get("/invoices/{invoice_id}/document")
async def download_invoice(
    invoice_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    invoice = _get_invoice(stores, invoice_id)
    content = render_invoice_pdf(invoice, tz=practice_timezone())
    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{invoice_filename(invoice)}"'},
    )
