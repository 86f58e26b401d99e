"""Patient routes."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from backend.app.core.errors import StoreUnavailable
from backend.app.core.security import get_current_user
from backend.app.crud import Stores
from backend.app.dependencies.stores import get_stores
from backend.app.models.user import User
from backend.app.schemas.patient import PatientCreate, PatientList, PatientRead, PatientUpdate
from backend.app.services.patients import get_patient_or_404, register_patient, remove_patient, search_patients

router = APIRouter(prefix="/patients", tags=["patients"])


@router.post("/", response_model=PatientRead, status_code=status.HTTP_201_CREATED)
async def create_patient(
    payload: PatientCreate,
    stores: Stores = Depends(get_stores),
    current_user: User = Depends(get_current_user),
):
    return register_patient(
        stores,
        name=payload.name,
        contact=payload.contact,
        address=payload.address,
        profile_image=payload.profile_image,
        created_by=current_user.id,
    )


@router.get("/", response_model=PatientList)
async def list_patients(
    search: Optional[str] = None,
    stores: Stores = Depends(get_stores),
    current_user: User = Depends(get_current_user),
):
    try:
        patients = stores.patients.list_all()
    except StoreUnavailable as exc:
        return PatientList(items=[], error=exc.message)
    return PatientList.model_validate({"items": search_patients(patients, search)}, from_attributes=True)


@router.get("/{patient_id}", response_model=PatientRead)
async def get_patient(
    patient_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    return get_patient_or_404(stores, patient_id)


@router.put("/{patient_id}", response_model=PatientRead)
async def update_patient(
    patient_id: int,
    payload: PatientUpdate,
    stores: Stores = Depends(get_stores),
    current_user: User = Depends(get_current_user),
):
    return stores.patients.update(
        patient_id,
        name=payload.name,
        contact=payload.contact,
        address=payload.address,
        profile_image=payload.profile_image,
    )


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    remove_patient(stores, patient_id)
