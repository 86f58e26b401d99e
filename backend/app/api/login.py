"""Therapist sign-in. A successful login stamps ``last_login`` and returns a bearer token."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backend.app.core.security import create_access_token, get_current_user, verify_password
from backend.app.core.time import utc_now
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.login import AccessToken, LoginRequest
from backend.app.schemas.user import UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

SIGN_IN_FAILED = "Incorrect email or password"


def authenticate_therapist(db: Session, email: str, password: str) -> User:
    therapist = db.query(User).filter(User.email == email).first()
    if therapist is None or not therapist.hashed_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SIGN_IN_FAILED)
    if not verify_password(password, therapist.hashed_password):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=SIGN_IN_FAILED)
    if not therapist.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="This therapist account is disabled")
    return therapist


@router.post("/login", response_model=AccessToken)
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    therapist = authenticate_therapist(db, credentials.email, credentials.password)
    therapist.last_login = utc_now()
    db.commit()
    db.refresh(therapist)
    logger.info("Therapist %s signed in", therapist.id)
    return AccessToken(
        access_token=create_access_token(therapist.id),
        therapist=UserRead.model_validate(therapist),
    )


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(get_current_user)):
    return current_user
