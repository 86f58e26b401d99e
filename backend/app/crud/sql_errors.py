"""Translate SQLAlchemy failures into StoreUnavailable."""

import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


@contextmanager
def translate_db_errors(db: Session, action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise StoreUnavailable(f"Could not {action}. Please try again.") from exc
