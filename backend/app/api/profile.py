"""The signed-in therapist's practice profile. New invoices copy these fields."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from backend.app.core.security import get_current_user
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.user import UserProfileRead, UserProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("/me", response_model=UserProfileRead)
async def get_my_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/me", response_model=UserProfileRead)
async def update_my_profile(
    profile: UserProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # current_user is bound to this request's session
    for field, value in profile.model_dump(exclude_none=True).items():
        setattr(current_user, field, value.strip())
    db.commit()
    db.refresh(current_user)
    logger.info("Updated practice profile of therapist %s", current_user.id)
    return current_user
