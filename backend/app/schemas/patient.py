"""Patient schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PatientCreate(BaseModel):
    name: str = Field(min_length=1)
    contact: str = ""
    address: str = ""
    profile_image: Optional[str] = None


class PatientUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    contact: Optional[str] = None
    address: Optional[str] = None
    profile_image: Optional[str] = None


class PatientRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    patient_code: str
    name: str
    contact: str
    address: str
    profile_image: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PatientList(BaseModel):
    items: List[PatientRead]
    error: Optional[str] = None
