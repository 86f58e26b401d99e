"""SQLAlchemy-backed patient store."""

from typing import Optional

from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, patient_not_found
from backend.app.crud.base import PatientStore
from backend.app.crud.mappers import patient_to_domain
from backend.app.crud.sql_errors import translate_db_errors
from backend.app.domain.entities import Patient
from backend.app.models.attendance import AttendanceRecord as AttendanceModel
from backend.app.models.patient import Patient as PatientModel


class SqlPatientStore(PatientStore):
    def __init__(self, db: Session):
        self.db = db

    def _get_model(self, patient_id: int) -> PatientModel:
        patient = self.db.query(PatientModel).filter(PatientModel.id == patient_id).first()
        if patient is None:
            raise NotFoundError(patient_not_found(patient_id))
        return patient

    def create(self, patient_code, name, contact, address, profile_image=None, created_by=None) -> Patient:
        with translate_db_errors(self.db, "save the patient"):
            patient = PatientModel(
                patient_code=patient_code,
                name=name,
                contact=contact,
                address=address,
                profile_image=profile_image,
                created_by=created_by,
            )
            self.db.add(patient)
            self.db.commit()
            self.db.refresh(patient)
            return patient_to_domain(patient)

    def get(self, patient_id: int) -> Optional[Patient]:
        with translate_db_errors(self.db, "load the patient"):
            patient = self.db.query(PatientModel).filter(PatientModel.id == patient_id).first()
            return patient_to_domain(patient) if patient else None

    def list_all(self) -> list[Patient]:
        with translate_db_errors(self.db, "load patients"):
            patients = self.db.query(PatientModel).order_by(PatientModel.created_at.desc(), PatientModel.id.desc()).all()
            return [patient_to_domain(p) for p in patients]

    def update(self, patient_id, name=None, contact=None, address=None, profile_image=None) -> Patient:
        with translate_db_errors(self.db, "update the patient"):
            patient = self._get_model(patient_id)
            update_fields = {
                "name": name,
                "contact": contact,
                "address": address,
                "profile_image": profile_image,
            }
            for field, value in update_fields.items():
                if value is not None:
                    setattr(patient, field, value)
            self.db.commit()
            self.db.refresh(patient)
            return patient_to_domain(patient)

    def delete(self, patient_id: int) -> int:
        with translate_db_errors(self.db, "delete the patient"):
            patient = self._get_model(patient_id)
            removed = (
                self.db.query(AttendanceModel)
                .filter(AttendanceModel.patient_id == patient_id)
                .delete(synchronize_session=False)
            )
            self.db.delete(patient)
            self.db.commit()
            return removed
