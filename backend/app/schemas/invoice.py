"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DateRangeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    start: date
    end: date


class InvoiceSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime
    status: str
    timestamp: datetime


class InvoiceCreate(BaseModel):
    start_date: date
    end_date: date
    full_name: str = Field(min_length=1)
    per_session_rate: Decimal = Field(gt=0)


class InvoicePaidUpdate(BaseModel):
    is_paid: bool


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    patient_id: int
    patient_name: str
    patient_full_name: str
    patient_contact: str
    patient_address: str
    therapist_name: str
    therapist_email: str
    therapist_registration_number: str
    therapist_address: str
    date_range: DateRangeRead
    sessions: List[InvoiceSessionRead]
    per_session_rate: Decimal
    total_sessions: int
    present_sessions: int
    total_amount: Decimal
    is_paid: bool
    created_at: datetime
    created_by: Optional[int] = None


class InvoiceCreated(InvoiceRead):
    document_url: str


class InvoiceList(BaseModel):
    items: List[InvoiceRead]
    error: Optional[str] = None


class RevenueSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    invoice_count: int = 0
    paid_count: int = 0
    total_revenue: Decimal = Decimal("0")
    paid_revenue: Decimal = Decimal("0")
    unpaid_revenue: Decimal = Decimal("0")


class PracticeInvoiceList(InvoiceList):
    revenue: Optional[RevenueSummaryRead] = None
