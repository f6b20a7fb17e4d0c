from __future__ import annotations

import logging
import time
import uuid
from datetime import date
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from clinic.core.config import settings
from clinic.db.session import get_db
from clinic.logging_utils import (
    bind_request_id,
    configure_logging,
    get_request_id,
    reset_request_id,
)
from clinic.models import Appointment, InventoryItem, Invoice, Patient, Treatment, Xray
from clinic.schemas import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentUpdate,
    DashboardRead,
    Dentition,
    InventoryCreate,
    InventoryRead,
    InventoryUpdate,
    InvoiceCreate,
    InvoiceRead,
    InvoiceUpdate,
    OdontogramRead,
    PatientCreate,
    PatientRead,
    PatientUpdate,
    PaymentCreate,
    QuadrantRead,
    TreatmentCreate,
    TreatmentRead,
    XrayCreate,
    XrayRead,
)
from clinic.services import (
    create_invoice,
    create_record,
    get_record,
    list_appointments,
    list_inventory,
    list_invoices,
    list_patients,
    list_treatments,
    list_xrays,
    record_payment,
    update_invoice,
    update_record,
)
from clinic.services.appointments import day_window
from clinic.services.dashboard import summarize
from clinic.services.odontogram import build_chart

configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")

logger = logging.getLogger(__name__)

REQUEST_COUNTER = Counter(
    "clinic_api_requests_total",
    "Total number of processed HTTP requests.",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "clinic_api_request_duration_seconds",
    "HTTP request latency in seconds.",
    ["method", "path"],
)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Populate the request id used by every log line of the request."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = bind_request_id(request_id)

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = get_request_id()
        finally:
            reset_request_id(token)

        return response


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit structured access logs and feed metrics."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start_time = time.perf_counter()
        method = request.method

        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - start_time
            path = _route_label(request)
            REQUEST_COUNTER.labels(method=method, path=path, status="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)
            logger.exception(
                "request failed",
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": round(elapsed * 1000, 2),
                },
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"message": INTERNAL_ERROR_MESSAGE},
            )

        elapsed = time.perf_counter() - start_time
        path = _route_label(request)
        status_code = response.status_code

        REQUEST_COUNTER.labels(method=method, path=path, status=str(status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)

        logger.info(
            "request completed",
            extra={
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )

        return response


app.add_middleware(AccessLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)


def _describe_error(error: dict[str, Any]) -> tuple[str | None, str]:
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc) or None
    message = error.get("msg", "Invalid value")
    return field, f"{field}: {message}" if field else message


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    described = [_describe_error(error) for error in exc.errors()]
    content: dict[str, Any] = {"message": "; ".join(text for _, text in described)}
    if described and described[0][0]:
        content["field"] = described[0][0]
    logger.info("validation failed", extra={"path": request.url.path, "errors": len(described)})
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled error outside the request pipeline", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": INTERNAL_ERROR_MESSAGE},
    )


def _fetch_or_404(db: Session, model: type, record_id: int, label: str):
    record = get_record(db, model, record_id)
    if not record:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
    return record


@app.get("/metrics")
def metrics() -> Response:
    """Expose Prometheus metrics for scraping."""

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint used by infrastructure probes."""

    return {"status": "ok"}


# Patients


@app.get("/api/patients", response_model=list[PatientRead])
def get_patients(
    search: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> list[Patient]:
    """List patients, newest first, optionally matching name or phone."""

    return list_patients(db, search)


@app.get("/api/patients/{patient_id}", response_model=PatientRead)
def get_patient(patient_id: int, db: Session = Depends(get_db)) -> Patient:
    return _fetch_or_404(db, Patient, patient_id, "Patient")


@app.post(
    "/api/patients", response_model=PatientRead, status_code=status.HTTP_201_CREATED
)
def create_patient(payload: PatientCreate, db: Session = Depends(get_db)) -> Patient:
    return create_record(db, Patient, payload.model_dump())


@app.put("/api/patients/{patient_id}", response_model=PatientRead)
def update_patient(
    patient_id: int, payload: PatientUpdate, db: Session = Depends(get_db)
) -> Patient:
    patient = _fetch_or_404(db, Patient, patient_id, "Patient")
    return update_record(db, patient, payload.model_dump(exclude_unset=True))


@app.get("/api/patients/{patient_id}/odontogram", response_model=OdontogramRead)
def get_patient_odontogram(
    patient_id: int,
    dentition: Dentition = Query(default="permanent"),
    db: Session = Depends(get_db),
) -> OdontogramRead:
    """Return the FDI tooth chart annotated with the patient's treatments."""

    _fetch_or_404(db, Patient, patient_id, "Patient")
    chart = build_chart(list_treatments(db, patient_id), dentition)
    return OdontogramRead(
        patient_id=patient_id,
        dentition=chart.dentition,
        quadrants=[QuadrantRead.model_validate(quadrant) for quadrant in chart.quadrants],
        treated_teeth=chart.treated_teeth,
        uncharted_treatments=[
            TreatmentRead.model_validate(treatment) for treatment in chart.uncharted
        ],
    )


# Inventory


@app.get("/api/inventory", response_model=list[InventoryRead])
def get_inventory(
    low_stock: bool = Query(default=False, alias="lowStock"),
    db: Session = Depends(get_db),
) -> list[InventoryItem]:
    """List supplies by name; each row reports whether it is low on stock."""

    return list_inventory(db, low_stock_only=low_stock)


@app.post(
    "/api/inventory", response_model=InventoryRead, status_code=status.HTTP_201_CREATED
)
def create_inventory_item(
    payload: InventoryCreate, db: Session = Depends(get_db)
) -> InventoryItem:
    return create_record(db, InventoryItem, payload.model_dump())


@app.put("/api/inventory/{item_id}", response_model=InventoryRead)
def update_inventory_item(
    item_id: int, payload: InventoryUpdate, db: Session = Depends(get_db)
) -> InventoryItem:
    item = _fetch_or_404(db, InventoryItem, item_id, "Inventory item")
    return update_record(db, item, payload.model_dump(exclude_unset=True))


# Appointments


@app.get("/api/appointments", response_model=list[AppointmentRead])
def get_appointments(
    day: date | None = Query(default=None, alias="date"),
    db: Session = Depends(get_db),
) -> list[Appointment]:
    """List appointments, latest first, optionally for one clinic calendar day."""

    window = day_window(day) if day else None
    return list_appointments(db, window)


@app.post(
    "/api/appointments",
    response_model=AppointmentRead,
    status_code=status.HTTP_201_CREATED,
)
def create_appointment(
    payload: AppointmentCreate, db: Session = Depends(get_db)
) -> Appointment:
    return create_record(db, Appointment, payload.model_dump())


@app.put("/api/appointments/{appointment_id}", response_model=AppointmentRead)
def update_appointment(
    appointment_id: int, payload: AppointmentUpdate, db: Session = Depends(get_db)
) -> Appointment:
    """Apply a partial update; any status may be written at any time."""

    appointment = _fetch_or_404(db, Appointment, appointment_id, "Appointment")
    return update_record(db, appointment, payload.model_dump(exclude_unset=True))


# Treatments


@app.get("/api/treatments", response_model=list[TreatmentRead])
def get_treatments(
    patient_id: int | None = Query(default=None, alias="patientId"),
    db: Session = Depends(get_db),
) -> list[Treatment]:
    return list_treatments(db, patient_id)


@app.post(
    "/api/treatments", response_model=TreatmentRead, status_code=status.HTTP_201_CREATED
)
def create_treatment(payload: TreatmentCreate, db: Session = Depends(get_db)) -> Treatment:
    return create_record(db, Treatment, payload.model_dump())


# Invoices


@app.get("/api/invoices", response_model=list[InvoiceRead])
def get_invoices(db: Session = Depends(get_db)) -> list[Invoice]:
    """List invoices, newest first, each with its outstanding balance."""

    return list_invoices(db)


@app.post(
    "/api/invoices", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED
)
def post_invoice(payload: InvoiceCreate, db: Session = Depends(get_db)) -> Invoice:
    return create_invoice(db, payload.model_dump())


@app.put("/api/invoices/{invoice_id}", response_model=InvoiceRead)
def put_invoice(
    invoice_id: int, payload: InvoiceUpdate, db: Session = Depends(get_db)
) -> Invoice:
    """Apply a partial update; the status is re-derived from the amounts."""

    invoice = _fetch_or_404(db, Invoice, invoice_id, "Invoice")
    return update_invoice(db, invoice, payload.model_dump(exclude_unset=True))


@app.post("/api/invoices/{invoice_id}/payments", response_model=InvoiceRead)
def post_invoice_payment(
    invoice_id: int, payload: PaymentCreate, db: Session = Depends(get_db)
) -> Invoice:
    invoice = _fetch_or_404(db, Invoice, invoice_id, "Invoice")
    try:
        return record_payment(db, invoice, payload.amount, payload.payment_method)
    except ValueError as exc:  # paid total overflows the amount column
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


# X-rays


@app.get("/api/xrays", response_model=list[XrayRead])
def get_xrays(
    patient_id: int = Query(alias="patientId"),
    db: Session = Depends(get_db),
) -> list[Xray]:
    return list_xrays(db, patient_id)


@app.post("/api/xrays", response_model=XrayRead, status_code=status.HTTP_201_CREATED)
def create_xray(payload: XrayCreate, db: Session = Depends(get_db)) -> Xray:
    """Register a file already uploaded to object storage against a patient."""

    return create_record(db, Xray, payload.model_dump())


# Dashboard


@app.get("/api/dashboard", response_model=DashboardRead)
def get_dashboard(db: Session = Depends(get_db)):
    """Headline figures: today's visits, revenue, outstanding balances, stock alerts."""

    return summarize(db)
