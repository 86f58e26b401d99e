"""Patient registration and removal."""

import logging
import secrets
import string
from datetime import datetime
from typing import Callable, Iterable, Optional

from backend.app.core.errors import NotFoundError, ValidationError, patient_not_found
from backend.app.core.time import utc_now
from backend.app.crud.base import Stores
from backend.app.domain.entities import Patient

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_patient_code(now: Optional[datetime] = None) -> str:
    """Readable ID such as ``PT-482913-K7QZ``: last six digits of epoch millis plus four random characters."""
    moment = now or utc_now()
    millis = str(int(moment.timestamp() * 1000))[-6:].zfill(6)
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(4))
    return f"PT-{millis}-{suffix}"


def register_patient(
    stores: Stores,
    name: str,
    contact: str = "",
    address: str = "",
    profile_image: Optional[str] = None,
    created_by: Optional[int] = None,
    code_factory: Callable[[], str] = generate_patient_code,
) -> Patient:
    if not name or not name.strip():
        raise ValidationError("Patient name is required", field="name")
    patient = stores.patients.create(
        patient_code=code_factory(),
        name=name.strip(),
        contact=(contact or "").strip(),
        address=(address or "").strip(),
        profile_image=profile_image,
        created_by=created_by,
    )
    logger.info("Registered patient %s (%s)", patient.id, patient.patient_code)
    return patient


def get_patient_or_404(stores: Stores, patient_id: int) -> Patient:
    patient = stores.patients.get(patient_id)
    if patient is None:
        raise NotFoundError(patient_not_found(patient_id))
    return patient


def search_patients(patients: Iterable[Patient], term: Optional[str] = None) -> list[Patient]:
    """Match name, patient code or address ignoring case, and contact as typed."""
    needle = (term or "").strip()
    if not needle:
        return list(patients)
    lowered = needle.lower()
    return [
        patient
        for patient in patients
        if lowered in (patient.name or "").lower()
        or lowered in (patient.patient_code or "").lower()
        or lowered in (patient.address or "").lower()
        or needle in (patient.contact or "")
    ]


def remove_patient(stores: Stores, patient_id: int) -> int:
    """Delete a patient and their attendance history. Issued invoices stay."""
    get_patient_or_404(stores, patient_id)
    removed = stores.patients.delete(patient_id)
    logger.info("Removed patient %s with %s attendance records", patient_id, removed)
    return removed
