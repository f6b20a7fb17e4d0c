"""Idempotent demo-data bootstrap, run once at deploy time.

Usage: ``clinic-seed`` or ``python -m clinic.seed``.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from clinic.core.config import settings
from clinic.db.session import SessionLocal
from clinic.logging_utils import configure_logging
from clinic.models import (
    Appointment,
    AppointmentStatus,
    InventoryItem,
    Patient,
    Treatment,
)
from clinic.models.base import utcnow

logger = logging.getLogger(__name__)

INVENTORY_CATALOG: list[tuple[str, int, int, str, Decimal]] = [
    ("Gloves (Box)", 50, 10, "box", Decimal("12.50")),
    ("Anesthetic (Vials)", 5, 20, "vial", Decimal("45.00")),
    ("Dental Floss", 100, 30, "pack", Decimal("2.00")),
]

PATIENTS: list[tuple[str, str, str, str]] = [
    ("John Doe", "555-0101", "None", "Penicillin"),
    ("Jane Smith", "555-0102", "Hypertension", "None"),
]


def ensure_inventory(session: Session) -> list[InventoryItem]:
    created = 0
    items: list[InventoryItem] = []
    for name, quantity, min_quantity, unit, cost in INVENTORY_CATALOG:
        item = session.execute(
            select(InventoryItem).where(InventoryItem.name == name)
        ).scalars().first()
        if not item:
            item = InventoryItem(
                name=name,
                quantity=quantity,
                min_quantity=min_quantity,
                unit=unit,
                cost=cost,
            )
            session.add(item)
            session.flush()
            created += 1
        items.append(item)

    logger.info("ensured inventory", extra={"created": created, "total": len(items)})
    return items


def ensure_patients(session: Session) -> list[Patient]:
    created = 0
    patients: list[Patient] = []
    for name, phone, medical_history, allergies in PATIENTS:
        patient = session.execute(
            select(Patient).where(Patient.name == name, Patient.phone == phone)
        ).scalars().first()
        if not patient:
            patient = Patient(
                name=name,
                phone=phone,
                medical_history=medical_history,
                allergies=allergies,
            )
            session.add(patient)
            session.flush()
            created += 1
        patients.append(patient)

    logger.info("ensured patients", extra={"created": created, "total": len(patients)})
    return patients


def ensure_first_visit(session: Session, patient: Patient) -> None:
    """Give the patient a checkup and a cleaning unless they already have history."""

    has_appointment = session.execute(
        select(Appointment.id).where(Appointment.patient_id == patient.id).limit(1)
    ).first()
    if not has_appointment:
        session.add(
            Appointment(
                patient_id=patient.id,
                date=utcnow(),
                status=AppointmentStatus.PENDING,
                notes="Regular checkup",
            )
        )

    has_treatment = session.execute(
        select(Treatment.id).where(Treatment.patient_id == patient.id).limit(1)
    ).first()
    if not has_treatment:
        session.add(
            Treatment(
                patient_id=patient.id,
                procedure_name="Cleaning",
                cost=Decimal("80.00"),
                notes="Routine cleaning",
            )
        )

    session.flush()
    logger.info(
        "ensured first visit",
        extra={
            "patient_id": patient.id,
            "appointment_created": not has_appointment,
            "treatment_created": not has_treatment,
        },
    )


def bootstrap(session: Session) -> None:
    """Insert any missing demo rows; safe to run repeatedly."""

    ensure_inventory(session)
    patients = ensure_patients(session)
    ensure_first_visit(session, patients[0])


def seed() -> None:
    configure_logging(settings.log_level)
    logger.info("starting seed process")

    session = SessionLocal()
    try:
        bootstrap(session)
        session.commit()
        logger.info("seed complete")
    except Exception:
        session.rollback()
        logger.exception("seed failed")
        raise
    finally:
        session.close()


if __name__ == "__main__":  # pragma: no cover - script entrypoint
    seed()
