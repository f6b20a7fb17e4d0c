"""Request and response schemas.

Field names are snake_case in Python and camelCase on the wire. Money is
parsed as ``Decimal`` and always serialized as a two-decimal string so no
amount ever passes through a float.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from clinic.models import DEFAULT_MIN_QUANTITY, AppointmentStatus, InvoiceStatus


def format_money(value: Decimal) -> str:
    return f"{Decimal(value):.2f}"


MoneyOut = Annotated[Decimal, PlainSerializer(format_money, return_type=str)]
MoneyIn = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
Dentition = Literal["permanent", "primary", "mixed"]


def _reject_null(value):
    if value is None:
        raise ValueError("may not be null")
    return value


def _to_naive_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# Patients


class PatientCreate(CamelModel):
    name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    medical_history: str | None = None
    allergies: str | None = None


class PatientUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    phone: str | None = Field(default=None, min_length=1)
    medical_history: str | None = None
    allergies: str | None = None

    @field_validator("name", "phone")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class PatientRead(CamelModel):
    id: int
    name: str
    phone: str
    medical_history: str | None
    allergies: str | None
    created_at: datetime


# Inventory


class InventoryCreate(CamelModel):
    name: str = Field(min_length=1)
    quantity: int = 0
    min_quantity: int = DEFAULT_MIN_QUANTITY
    unit: str = Field(min_length=1)
    cost: MoneyIn


class InventoryUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    quantity: int | None = None
    min_quantity: int | None = None
    unit: str | None = Field(default=None, min_length=1)
    cost: MoneyIn | None = None

    @field_validator("name", "quantity", "min_quantity", "unit", "cost")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class InventoryRead(CamelModel):
    id: int
    name: str
    quantity: int
    min_quantity: int
    unit: str
    cost: MoneyOut
    low_stock: bool


# Appointments


class AppointmentCreate(CamelModel):
    patient_id: int
    date: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: str | None = None

    @field_validator("date")
    @classmethod
    def naive_utc(cls, value: datetime) -> datetime:
        return _to_naive_utc(value)


class AppointmentUpdate(CamelModel):
    patient_id: int | None = None
    date: datetime | None = None
    status: AppointmentStatus | None = None
    notes: str | None = None

    @field_validator("patient_id", "status")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)

    @field_validator("date")
    @classmethod
    def naive_utc(cls, value: datetime | None) -> datetime:
        return _to_naive_utc(_reject_null(value))


class AppointmentRead(CamelModel):
    id: int
    patient_id: int
    date: datetime
    status: AppointmentStatus
    notes: str | None


# Treatments


class TreatmentCreate(CamelModel):
    patient_id: int
    appointment_id: int | None = None
    tooth_number: int | None = None
    procedure_name: str = Field(min_length=1)
    cost: MoneyIn
    notes: str | None = None

    @field_validator("appointment_id", "tooth_number")
    @classmethod
    def zero_means_none(cls, value: int | None) -> int | None:
        # forms submit 0 for "no tooth" / "walk-in"
        return value or None


class TreatmentRead(CamelModel):
    id: int
    patient_id: int
    appointment_id: int | None
    tooth_number: int | None
    procedure_name: str
    cost: MoneyOut
    date: datetime
    notes: str | None


# Invoices


class InvoiceCreate(CamelModel):
    patient_id: int
    total_amount: MoneyIn
    paid_amount: MoneyIn = Decimal("0")
    # Accepted for compatibility; the stored status is always derived.
    status: InvoiceStatus | None = None
    payment_method: str | None = None


class InvoiceUpdate(CamelModel):
    patient_id: int | None = None
    total_amount: MoneyIn | None = None
    paid_amount: MoneyIn | None = None
    status: InvoiceStatus | None = None
    payment_method: str | None = None

    @field_validator("patient_id", "total_amount", "paid_amount")
    @classmethod
    def not_null(cls, value):
        return _reject_null(value)


class PaymentCreate(CamelModel):
    amount: Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]
    payment_method: str | None = None


class InvoiceRead(CamelModel):
    id: int
    patient_id: int
    total_amount: MoneyOut
    paid_amount: MoneyOut
    balance: MoneyOut
    status: InvoiceStatus
    payment_method: str | None
    created_at: datetime


# X-rays


class XrayCreate(CamelModel):
    patient_id: int
    url: str = Field(min_length=1)
    description: str | None = None


class XrayRead(CamelModel):
    id: int
    patient_id: int
    url: str
    description: str | None
    created_at: datetime


# Odontogram and dashboard


class ToothRead(CamelModel):
    number: int
    treated: bool
    procedures: list[str]


class QuadrantRead(CamelModel):
    key: str
    title: str
    teeth: list[ToothRead]


class OdontogramRead(CamelModel):
    patient_id: int
    dentition: Dentition
    quadrants: list[QuadrantRead]
    treated_teeth: list[int]
    uncharted_treatments: list[TreatmentRead]


class DashboardRead(CamelModel):
    today_appointments: int
    total_revenue: MoneyOut
    pending_revenue: MoneyOut
    low_stock_count: int
    patient_count: int
