"""Attendance routes: marking, editing and per-patient summaries."""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status

from backend.app.core.errors import StoreUnavailable
from backend.app.core.security import get_current_user
from backend.app.core.time import practice_timezone, utc_now
from backend.app.crud import Stores
from backend.app.dependencies.stores import get_stores
from backend.app.domain.entities import DateRange
from backend.app.models.user import User
from backend.app.schemas.attendance import (
    AttendanceCreate,
    AttendanceList,
    AttendanceRead,
    AttendanceSummaryReport,
    AttendanceToday,
    AttendanceUpdate,
)
from backend.app.services.attendance import (
    find_today_record,
    summarize_attendance,
    validate_date_range,
    validate_session_timestamp,
    validate_status,
)
from backend.app.services.patients import get_patient_or_404

logger = logging.getLogger(__name__)

router = APIRouter(tags=["attendance"])


@router.get("/patients/{patient_id}/attendance", response_model=AttendanceList)
async def list_attendance(
    patient_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    try:
        records = stores.attendance.list_by_patient(patient_id)
    except StoreUnavailable as exc:
        return AttendanceList(items=[], error=exc.message)
    return AttendanceList.model_validate({"items": records}, from_attributes=True)


@router.post(
    "/patients/{patient_id}/attendance", response_model=AttendanceRead, status_code=status.HTTP_201_CREATED
)
async def mark_attendance(
    patient_id: int,
    payload: AttendanceCreate,
    stores: Stores = Depends(get_stores),
    current_user: User = Depends(get_current_user),
):
    get_patient_or_404(stores, patient_id)
    timestamp = validate_session_timestamp(payload.timestamp, utc_now())
    record = stores.attendance.create(patient_id, validate_status(payload.status), timestamp)
    logger.info("Marked patient %s %s", patient_id, record.status)
    return record


@router.get("/patients/{patient_id}/attendance/today", response_model=AttendanceToday)
async def get_today_attendance(
    patient_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    try:
        get_patient_or_404(stores, patient_id)
        records = stores.attendance.list_by_patient(patient_id)
    except StoreUnavailable as exc:
        return AttendanceToday(error=exc.message)
    record = find_today_record(records, utc_now(), practice_timezone())
    return AttendanceToday.model_validate({"record": record}, from_attributes=True)


@router.get("/patients/{patient_id}/attendance/summary", response_model=AttendanceSummaryReport)
async def get_attendance_summary(
    patient_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    stores: Stores = Depends(get_stores),
    current_user: User = Depends(get_current_user),
):
    date_range = None
    if start_date is not None or end_date is not None:
        date_range = DateRange(start=start_date, end=end_date)
        validate_date_range(date_range)
    try:
        get_patient_or_404(stores, patient_id)
        records = stores.attendance.list_by_patient(patient_id)
    except StoreUnavailable as exc:
        return AttendanceSummaryReport(error=exc.message)
    summary = summarize_attendance(records, date_range, practice_timezone())
    return AttendanceSummaryReport.model_validate(summary, from_attributes=True)


@router.put("/attendance/{record_id}", response_model=AttendanceRead)
async def update_attendance(
    record_id: int,
    payload: AttendanceUpdate,
    stores: Stores = Depends(get_stores),
    current_user: User = Depends(get_current_user),
):
    return stores.attendance.update(record_id, validate_status(payload.status))


@router.delete("/attendance/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_attendance(
    record_id: int, stores: Stores = Depends(get_stores), current_user: User = Depends(get_current_user)
):
    stores.attendance.delete(record_id)
