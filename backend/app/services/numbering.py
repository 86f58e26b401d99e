"""Sequential per-year invoice numbers."""

import logging
from datetime import UTC, datetime, tzinfo
from typing import Callable

from backend.app.core.errors import NumberingUnavailable, StoreUnavailable
from backend.app.core.time import utc_now
from backend.app.crud.base import CounterStore

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV"
NUMBER_WIDTH = 3


def format_invoice_number(year: int, count: int) -> str:
    """``INV-<year>-<count>``, count zero-padded to at least three digits."""
    return f"{INVOICE_PREFIX}-{year}-{count:0{NUMBER_WIDTH}d}"


class InvoiceNumberingService:
    """Hands out invoice numbers from a counter keyed by calendar year.

    The counter store owns atomicity; this service only picks the key and
    formats the result. No number is produced unless the increment commits.
    """

    def __init__(
        self,
        counter_store: CounterStore,
        clock: Callable[[], datetime] = utc_now,
        tz: tzinfo = UTC,
    ):
        self.counter_store = counter_store
        self.clock = clock
        self.tz = tz

    def current_year(self) -> int:
        return self.clock().astimezone(self.tz).year

    def next_invoice_number(self) -> str:
        year = self.current_year()
        try:
            count = self.counter_store.transactional_increment(str(year))
        except StoreUnavailable as exc:
            logger.error("Invoice counter for %s unavailable: %s", year, exc)
            raise NumberingUnavailable("Could not allocate an invoice number. Please try again.") from exc
        return format_invoice_number(year, count)
