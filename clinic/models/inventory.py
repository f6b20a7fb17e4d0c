from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from clinic.models.base import Base

DEFAULT_MIN_QUANTITY = 10


class InventoryItem(Base):
    """Clinic supply tracked against a low-stock threshold."""

    __tablename__ = "inventory"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_quantity: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_MIN_QUANTITY, nullable=False
    )
    unit: Mapped[str] = mapped_column(Text, nullable=False)
    cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    @property
    def low_stock(self) -> bool:
        return self.quantity <= self.min_quantity
