"""Invoice arithmetic.

The stored status is always a function of the amounts, so clients can no
longer leave an invoice marked Paid with an outstanding balance.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from clinic.models import Invoice, InvoiceStatus
from clinic.services.records import create_record, update_record

logger = logging.getLogger(__name__)

# NUMERIC(12, 2) ceiling of the amount columns
MAX_AMOUNT = Decimal("9999999999.99")


def derive_invoice_status(total_amount: Decimal, paid_amount: Decimal) -> InvoiceStatus:
    """Return Unpaid, Partial or Paid for the given amounts."""

    if paid_amount <= 0:
        return InvoiceStatus.UNPAID
    if paid_amount >= total_amount:
        return InvoiceStatus.PAID
    return InvoiceStatus.PARTIAL


def _with_derived_status(
    values: dict[str, Any], total_amount: Decimal, paid_amount: Decimal
) -> dict[str, Any]:
    derived = derive_invoice_status(total_amount, paid_amount)
    requested = values.get("status")
    if requested is not None and requested != derived:
        logger.debug(
            "overriding client invoice status",
            extra={"requested_status": requested.value, "derived_status": derived.value},
        )
    return {**values, "status": derived}


def create_invoice(db: Session, values: dict[str, Any]) -> Invoice:
    total = Decimal(values["total_amount"])
    paid = Decimal(values.get("paid_amount") or 0)
    values = _with_derived_status({**values, "paid_amount": paid}, total, paid)
    return create_record(db, Invoice, values)


def update_invoice(db: Session, invoice: Invoice, values: dict[str, Any]) -> Invoice:
    """Apply a partial update and re-derive the status from the resulting amounts."""

    total = Decimal(values.get("total_amount", invoice.total_amount))
    paid = Decimal(values.get("paid_amount", invoice.paid_amount))
    if paid > MAX_AMOUNT:
        raise ValueError(f"paidAmount: must not exceed {MAX_AMOUNT}")
    return update_record(db, invoice, _with_derived_status(values, total, paid))


def record_payment(
    db: Session, invoice: Invoice, amount: Decimal, payment_method: str | None = None
) -> Invoice:
    """Add ``amount`` to the paid total of a single invoice.

    Raises ``ValueError`` when the new paid total no longer fits the column.
    """

    values: dict[str, Any] = {"paid_amount": Decimal(invoice.paid_amount) + amount}
    if payment_method is not None:
        values["payment_method"] = payment_method
    invoice = update_invoice(db, invoice, values)
    logger.info(
        "payment recorded",
        extra={
            "invoice_id": invoice.id,
            "amount": str(amount),
            "status": invoice.status.value,
        },
    )
    return invoice
