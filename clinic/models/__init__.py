"""SQLAlchemy models for the clinic API."""

from clinic.models.appointment import Appointment, AppointmentStatus
from clinic.models.inventory import DEFAULT_MIN_QUANTITY, InventoryItem
from clinic.models.invoice import Invoice, InvoiceStatus
from clinic.models.patient import Patient
from clinic.models.treatment import Treatment
from clinic.models.xray import Xray

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "DEFAULT_MIN_QUANTITY",
    "InventoryItem",
    "Invoice",
    "InvoiceStatus",
    "Patient",
    "Treatment",
    "Xray",
]
