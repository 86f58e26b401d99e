"""Practice-wide attendance analytics."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from backend.app.core.errors import StoreUnavailable
from backend.app.core.security import get_current_user
from backend.app.core.time import practice_timezone
from backend.app.crud import Stores
from backend.app.dependencies.stores import get_stores
from backend.app.domain.entities import DateRange
from backend.app.models.user import User
from backend.app.schemas.analytics import PracticeAnalyticsRead
from backend.app.services.attendance import build_practice_analytics, validate_date_range

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/attendance", response_model=PracticeAnalyticsRead)
async def get_attendance_analytics(
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
        analytics = build_practice_analytics(
            stores.patients.list_all(), stores.attendance, date_range, practice_timezone()
        )
    except StoreUnavailable as exc:
        return PracticeAnalyticsRead(error=exc.message)
    return PracticeAnalyticsRead.model_validate(
        {
            "items": analytics.patients,
            "total_patients": analytics.total_patients,
            "total_sessions": analytics.total_sessions,
            "total_present": analytics.total_present,
            "total_absent": analytics.total_absent,
            "attendance_rate": analytics.attendance_rate,
        },
        from_attributes=True,
    )
