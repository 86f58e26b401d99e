"""Invoice model for billing.

Patient and therapist identity columns are copies taken when the invoice is
issued and are never refreshed from the patient or user rows.
"""

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, Numeric, String, Text

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String(32), unique=True, nullable=False, index=True)

    patient_id = Column(Integer, nullable=False, index=True)
    patient_name = Column(String, nullable=False)
    patient_full_name = Column(String, nullable=False)
    patient_contact = Column(String(100), nullable=False, default="")
    patient_address = Column(Text, nullable=False, default="")

    therapist_name = Column(String(255), nullable=False, default="")
    therapist_email = Column(String(255), nullable=False, default="")
    therapist_registration_number = Column(String(100), nullable=True)
    therapist_address = Column(Text, nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    sessions = Column(JSON, nullable=False, default=list)

    per_session_rate = Column(Numeric(10, 2), nullable=False)
    total_sessions = Column(Integer, nullable=False, default=0)
    present_sessions = Column(Integer, nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False, default=0)

    is_paid = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    created_by = Column(Integer, nullable=True)
