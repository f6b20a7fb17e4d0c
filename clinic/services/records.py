"""Persistence helpers: single-table selects, inserts and partial updates."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, TypeVar

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from clinic.models import Appointment, InventoryItem, Invoice, Patient, Treatment, Xray
from clinic.models.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def get_record(db: Session, model: type[ModelT], record_id: int) -> ModelT | None:
    return db.get(model, record_id)


def create_record(db: Session, model: type[ModelT], values: dict[str, Any]) -> ModelT:
    """Insert a row and return it with server-generated fields populated."""

    record = model(**values)
    db.add(record)
    db.flush()
    db.refresh(record)
    logger.info(
        "record created",
        extra={"resource": model.__tablename__, "record_id": record.id},
    )
    return record


def update_record(db: Session, record: ModelT, values: dict[str, Any]) -> ModelT:
    """Assign the given fields and return the refreshed row."""

    for field, value in values.items():
        setattr(record, field, value)
    db.flush()
    db.refresh(record)
    logger.info(
        "record updated",
        extra={
            "resource": record.__tablename__,
            "record_id": record.id,
            "fields": sorted(values),
        },
    )
    return record


def list_patients(db: Session, search: str | None = None) -> list[Patient]:
    """Newest patients first, optionally matching name or phone case-insensitively."""

    stmt = select(Patient)
    if search:
        pattern = _like_pattern(search)
        stmt = stmt.where(
            or_(
                Patient.name.ilike(pattern, escape="\\"),
                Patient.phone.ilike(pattern, escape="\\"),
            )
        )
    stmt = stmt.order_by(Patient.created_at.desc(), Patient.id.desc())
    return list(db.execute(stmt).scalars().all())


def list_inventory(db: Session, *, low_stock_only: bool = False) -> list[InventoryItem]:
    stmt = select(InventoryItem)
    if low_stock_only:
        stmt = stmt.where(InventoryItem.quantity <= InventoryItem.min_quantity)
    stmt = stmt.order_by(InventoryItem.name, InventoryItem.id)
    return list(db.execute(stmt).scalars().all())


def list_appointments(
    db: Session, window: tuple[datetime, datetime] | None = None
) -> list[Appointment]:
    """Latest appointments first; ``window`` is a half-open [start, end) range."""

    stmt = select(Appointment)
    if window is not None:
        start, end = window
        stmt = stmt.where(Appointment.date >= start, Appointment.date < end)
    stmt = stmt.order_by(Appointment.date.desc(), Appointment.id.desc())
    return list(db.execute(stmt).scalars().all())


def list_treatments(db: Session, patient_id: int | None = None) -> list[Treatment]:
    stmt = select(Treatment)
    if patient_id is not None:
        stmt = stmt.where(Treatment.patient_id == patient_id)
    stmt = stmt.order_by(Treatment.date.desc(), Treatment.id.desc())
    return list(db.execute(stmt).scalars().all())


def list_invoices(db: Session) -> list[Invoice]:
    stmt = select(Invoice).order_by(Invoice.created_at.desc(), Invoice.id.desc())
    return list(db.execute(stmt).scalars().all())


def list_xrays(db: Session, patient_id: int) -> list[Xray]:
    stmt = (
        select(Xray)
        .where(Xray.patient_id == patient_id)
        .order_by(Xray.created_at.desc(), Xray.id.desc())
    )
    return list(db.execute(stmt).scalars().all())
