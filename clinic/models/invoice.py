from __future__ import annotations

import enum
from decimal import Decimal

from sqlalchemy import Enum, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinic.models.base import Base, CreatedAtMixin


class InvoiceStatus(str, enum.Enum):
    """Payment state of an invoice, derived from its amounts."""

    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"


class Invoice(Base, CreatedAtMixin):
    """Bill issued to a patient."""

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    patient_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), nullable=False
    )
    status: Mapped[InvoiceStatus] = mapped_column(
        Enum(
            InvoiceStatus,
            name="invoice_status",
            values_callable=lambda members: [member.value for member in members],
        ),
        default=InvoiceStatus.UNPAID,
        nullable=False,
    )
    payment_method: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def balance(self) -> Decimal:
        return Decimal(self.total_amount) - Decimal(self.paid_amount)
