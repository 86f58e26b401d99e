import logging
import os

from sqlalchemy.orm import Session

from backend.app.core.security import get_password_hash
from backend.app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_DEV_PASSWORD = "Secret123!"
DEFAULT_DEV_THERAPIST = {
    "email": "therapist@test.com",
    "display_name": "Dr. Demo Therapist",
    "registration_number": "PT-REG-0001",
    "address": "12 Clinic Road, Bengaluru",
}


def ensure_default_dev_therapist(db: Session) -> None:
    """
    Create a default therapist account for local development if it does not exist.
    Skips execution when running under pytest to avoid altering test expectations.
    """
    if os.getenv("PYTEST_CURRENT_TEST"):
        return

    email = DEFAULT_DEV_THERAPIST["email"]
    if db.query(User).filter(User.email == email).first():
        return

    db.add(
        User(
            email=email,
            hashed_password=get_password_hash(DEFAULT_DEV_PASSWORD),
            display_name=DEFAULT_DEV_THERAPIST["display_name"],
            registration_number=DEFAULT_DEV_THERAPIST["registration_number"],
            address=DEFAULT_DEV_THERAPIST["address"],
            is_active=True,
        )
    )
    db.commit()
    logger.info("Created development therapist %s", email)
