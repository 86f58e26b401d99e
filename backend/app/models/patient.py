"""Patient model for PhysioDesk."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from backend.app.db.base_class import Base
from backend.app.core.time import utc_now


class Patient(Base):
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True, index=True)
    patient_code = Column(String(32), unique=True, nullable=False, index=True)
    name = Column(String, nullable=False)
    contact = Column(String(100), nullable=False, default="")
    address = Column(Text, nullable=False, default="")
    profile_image = Column(String(512), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utc_now)

    attendance_records = relationship(
        "AttendanceRecord", back_populates="patient", cascade="all, delete-orphan", passive_deletes=True
    )
