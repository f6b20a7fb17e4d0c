"""Front-page figures for the clinic dashboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from clinic.models import Appointment, InventoryItem, Invoice, InvoiceStatus, Patient
from clinic.services.appointments import clinic_today, day_window

CENT = Decimal("0.01")


@dataclass
class DashboardSummary:
    today_appointments: int
    total_revenue: Decimal
    pending_revenue: Decimal
    low_stock_count: int
    patient_count: int


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT)


def summarize(db: Session, today: date | None = None) -> DashboardSummary:
    start, end = day_window(today or clinic_today())

    today_appointments = db.execute(
        select(func.count(Appointment.id)).where(
            Appointment.date >= start, Appointment.date < end
        )
    ).scalar_one()
    total_revenue = db.execute(select(func.sum(Invoice.total_amount))).scalar_one()
    pending_revenue = db.execute(
        select(func.sum(Invoice.total_amount - Invoice.paid_amount)).where(
            Invoice.status != InvoiceStatus.PAID
        )
    ).scalar_one()
    low_stock_count = db.execute(
        select(func.count(InventoryItem.id)).where(
            InventoryItem.quantity <= InventoryItem.min_quantity
        )
    ).scalar_one()
    patient_count = db.execute(select(func.count(Patient.id))).scalar_one()

    return DashboardSummary(
        today_appointments=today_appointments,
        total_revenue=_money(total_revenue),
        pending_revenue=_money(pending_revenue),
        low_stock_count=low_stock_count,
        patient_count=patient_count,
    )
