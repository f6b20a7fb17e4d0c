"""Service layer utilities for the clinic API."""

from clinic.services.billing import (
    create_invoice,
    derive_invoice_status,
    record_payment,
    update_invoice,
)
from clinic.services.records import (
    create_record,
    get_record,
    list_appointments,
    list_inventory,
    list_invoices,
    list_patients,
    list_treatments,
    list_xrays,
    update_record,
)

__all__ = [
    "create_invoice",
    "create_record",
    "derive_invoice_status",
    "get_record",
    "list_appointments",
    "list_inventory",
    "list_invoices",
    "list_patients",
    "list_treatments",
    "list_xrays",
    "record_payment",
    "update_invoice",
    "update_record",
]
