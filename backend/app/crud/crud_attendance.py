"""SQLAlchemy-backed attendance store."""

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from backend.app.core.errors import NotFoundError, attendance_not_found
from backend.app.core.time import as_utc, utc_now
from backend.app.crud.base import AttendanceStore
from backend.app.crud.mappers import attendance_to_domain
from backend.app.crud.sql_errors import translate_db_errors
from backend.app.domain.entities import AttendanceRecord
from backend.app.models.attendance import AttendanceRecord as AttendanceModel


class SqlAttendanceStore(AttendanceStore):
    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now):
        self.db = db
        self._clock = clock

    def _get_model(self, record_id: int) -> AttendanceModel:
        record = self.db.query(AttendanceModel).filter(AttendanceModel.id == record_id).first()
        if record is None:
            raise NotFoundError(attendance_not_found(record_id))
        return record

    def list_by_patient(self, patient_id: int) -> list[AttendanceRecord]:
        with translate_db_errors(self.db, "load attendance records"):
            records = (
                self.db.query(AttendanceModel)
                .filter(AttendanceModel.patient_id == patient_id)
                .order_by(AttendanceModel.timestamp.desc(), AttendanceModel.id.desc())
                .all()
            )
            return [attendance_to_domain(r) for r in records]

    def get(self, record_id: int) -> Optional[AttendanceRecord]:
        with translate_db_errors(self.db, "load the attendance record"):
            record = self.db.query(AttendanceModel).filter(AttendanceModel.id == record_id).first()
            return attendance_to_domain(record) if record else None

    def create(self, patient_id: int, status: str, timestamp: Optional[datetime] = None) -> AttendanceRecord:
        with translate_db_errors(self.db, "mark attendance"):
            record = AttendanceModel(patient_id=patient_id, status=status, timestamp=as_utc(timestamp or self._clock()))
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return attendance_to_domain(record)

    def update(self, record_id: int, status: str) -> AttendanceRecord:
        with translate_db_errors(self.db, "update attendance"):
            record = self._get_model(record_id)
            record.status = status
            record.timestamp = self._clock()
            self.db.commit()
            self.db.refresh(record)
            return attendance_to_domain(record)

    def delete(self, record_id: int) -> None:
        with translate_db_errors(self.db, "delete the attendance record"):
            record = self._get_model(record_id)
            self.db.delete(record)
            self.db.commit()

    def delete_by_patient(self, patient_id: int) -> int:
        with translate_db_errors(self.db, "delete attendance records"):
            removed = (
                self.db.query(AttendanceModel)
                .filter(AttendanceModel.patient_id == patient_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            return removed
