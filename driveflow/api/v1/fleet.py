"""Admin fleet endpoints - unit list, unit financials and maintenance log"""

from datetime import date
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from driveflow.api.v1.schemas import (
    BookingSchema,
    FleetUnitDetailResponse,
    FleetUnitListResponse,
    FleetUnitSchema,
    ServiceHealthSchema,
    ServiceLogRequest,
    ServiceLogResponse,
    ServiceLogSchema,
    UnitFinancialsSchema,
)
from driveflow.api.dependencies import CurrentUser, get_request_id, require_admin
from driveflow.api.errors import raise_http_error
from driveflow.infrastructure.database.session import get_db
from driveflow.infrastructure.database.repositories import FleetRepository
from driveflow.domain.exceptions import DomainException
from driveflow.domain.fleet import assess_service_health, compute_unit_financials, record_service
from driveflow.domain.models import ServiceLogEntry

router = APIRouter()


def today() -> date:
    return date.today()


@router.get("/fleet/units", response_model=FleetUnitListResponse)
def list_units(
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        units = FleetRepository(db).list_units()
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return FleetUnitListResponse(units=[FleetUnitSchema.model_validate(u) for u in units])


@router.get("/fleet/units/{unit_id}", response_model=FleetUnitDetailResponse)
def get_unit(
    unit_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Unit card: earnings against service spend, maintenance health, history"""
    repo = FleetRepository(db)
    try:
        unit = repo.fetch_unit(unit_id)
        bookings = repo.unit_bookings(unit_id)
        logs = repo.list_service_logs(unit_id)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))

    return FleetUnitDetailResponse(
        unit=FleetUnitSchema.model_validate(unit),
        financials=UnitFinancialsSchema.model_validate(compute_unit_financials(bookings, logs)),
        health=ServiceHealthSchema.model_validate(assess_service_health(unit, today())),
        service_logs=[ServiceLogSchema.model_validate(log) for log in logs],
        bookings=[BookingSchema.model_validate(b) for b in bookings],
    )


@router.post("/fleet/units/{unit_id}/service-logs", response_model=ServiceLogResponse, status_code=201)
def log_service(
    unit_id: str,
    body: ServiceLogRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Record a service visit and reset the unit's odometer and next-service schedule"""
    repo = FleetRepository(db)
    try:
        unit = repo.fetch_unit(unit_id)
        entry, updated_unit = record_service(
            unit,
            ServiceLogEntry(
                log_id="",
                unit_id=unit_id,
                service_date=body.service_date,
                service_type=body.service_type,
                mileage_at_service=body.mileage_at_service,
                cost_cents=body.cost_cents,
                notes=body.notes,
            ),
            next_interval_km=body.next_interval_km,
            next_service_date=body.next_service_date,
        )
        stored = repo.add_service_log(entry, updated_unit)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)

    return ServiceLogResponse(
        log=ServiceLogSchema.model_validate(stored),
        unit=FleetUnitSchema.model_validate(updated_unit),
        health=ServiceHealthSchema.model_validate(assess_service_health(updated_unit, today())),
    )
