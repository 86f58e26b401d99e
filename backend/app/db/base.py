from backend.app.db.base_class import Base

# Import models to register metadata for Base.metadata.create_all in tests
from backend.app.models.user import User  # noqa: F401
from backend.app.models.patient import Patient  # noqa: F401
from backend.app.models.attendance import AttendanceRecord  # noqa: F401
from backend.app.models.invoice import Invoice  # noqa: F401
from backend.app.models.invoice_counter import InvoiceCounter  # noqa: F401
