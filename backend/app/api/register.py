"""Therapist sign-up. New accounts start active with an empty practice profile."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.security import get_password_hash
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.user import UserCreate, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=UserRead)
def register_therapist(user_in: UserCreate, db: Session = Depends(get_db)):
    if db.query(User).filter(User.email == user_in.email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="A therapist account already uses this email"
        )
    therapist = User(
        email=user_in.email,
        hashed_password=get_password_hash(user_in.password),
        display_name=(user_in.display_name or "").strip() or None,
    )
    db.add(therapist)
    db.commit()
    db.refresh(therapist)
    logger.info("Registered therapist account %s", therapist.id)
    return therapist
