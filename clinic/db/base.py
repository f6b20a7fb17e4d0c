"""Import SQLAlchemy models for Alembic's autogenerate feature."""

from clinic.models.base import Base
from clinic.models import (  # noqa: F401
    Appointment,
    InventoryItem,
    Invoice,
    Patient,
    Treatment,
    Xray,
)

__all__ = [
    "Base",
    "Appointment",
    "InventoryItem",
    "Invoice",
    "Patient",
    "Treatment",
    "Xray",
]
