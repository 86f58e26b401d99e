"""SQLAlchemy-backed invoice counter.

Each increment runs in its own short transaction, independent of the request
session, so an issued number stays issued even if the caller's later work is
rolled back.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from backend.app.core.errors import StoreUnavailable
from backend.app.crud.base import CounterStore
from backend.app.models.invoice_counter import InvoiceCounter

logger = logging.getLogger(__name__)


class SqlCounterStore(CounterStore):
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def transactional_increment(self, key: str) -> int:
        # Two attempts: a concurrent first-of-year insert makes ours collide once.
        for attempt in range(2):
            session = self.session_factory()
            try:
                result = session.execute(
                    update(InvoiceCounter)
                    .where(InvoiceCounter.key == key)
                    .values(count=InvoiceCounter.count + 1)
                )
                if result.rowcount == 0:
                    session.add(InvoiceCounter(key=key, count=1))
                    session.flush()
                    value = 1
                else:
                    value = session.execute(
                        select(InvoiceCounter.count).where(InvoiceCounter.key == key)
                    ).scalar_one()
                session.commit()
                return value
            except IntegrityError as exc:
                session.rollback()
                if attempt:
                    logger.exception("Counter %s could not be initialised", key)
                    raise StoreUnavailable(f"Counter {key} could not be initialised") from exc
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Counter %s increment failed", key)
                raise StoreUnavailable(f"Counter {key} is unavailable") from exc
            finally:
                session.close()
        raise StoreUnavailable(f"Counter {key} is unavailable")
