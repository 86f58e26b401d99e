"""Domain error types shared by services, stores and routers."""


class PhysioError(Exception):
    """Base class for domain-level errors.

    ``code`` is the machine-readable name sent to the client and
    ``retryable`` tells the client whether repeating the call may succeed.
    """

    code = "error"
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict:
        return {"detail": self.message, "error": self.code, "retryable": self.retryable}


class ValidationError(PhysioError):
    """Caller-side precondition violation, detected before any backend call."""

    code = "validation_error"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.field is not None:
            payload["field"] = self.field
        return payload


class NotFoundError(PhysioError):
    code = "not_found"


class StoreUnavailable(PhysioError):
    """The backing store could not be reached or rejected the operation."""

    code = "store_unavailable"
    retryable = True


class NumberingUnavailable(PhysioError):
    """The invoice counter transaction did not complete. No number was issued."""

    code = "numbering_unavailable"
    retryable = True


class PersistenceFailed(PhysioError):
    """An invoice number was allocated but the invoice itself was not saved.

    The number in ``invoice_number`` is consumed and will not be reissued.
    """

    code = "persistence_failed"
    retryable = True

    def __init__(self, message: str, invoice_number: str):
        super().__init__(message)
        self.invoice_number = invoice_number

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["invoice_number"] = self.invoice_number
        return payload


class RenderFailed(PhysioError):
    """Document generation failed for an invoice that is already stored."""

    code = "render_failed"
    retryable = True

    def __init__(self, message: str, invoice_id: int):
        super().__init__(message)
        self.invoice_id = invoice_id

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["invoice_id"] = self.invoice_id
        return payload


def patient_not_found(patient_id: int) -> str:
    return f"Patient {patient_id} not found"


def attendance_not_found(record_id: int) -> str:
    return f"Attendance record {record_id} not found"


def invoice_not_found(invoice_id: int) -> str:
    return f"Invoice {invoice_id} not found"
