from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinic.models.base import Base, utcnow


class Treatment(Base):
    """Procedure performed on a patient, optionally on a single tooth (FDI number)."""

    __tablename__ = "treatments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    appointment_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    tooth_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    procedure_name: Mapped[str] = mapped_column(Text, nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
