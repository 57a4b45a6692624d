"""Fleet unit rules - earnings, maintenance health and service logging"""

from dataclasses import replace
from datetime import date
from typing import Iterable, Optional, Tuple

from driveflow.domain.exceptions import RecordValidationError
from driveflow.domain.models import (
    Booking,
    BookingStatus,
    FleetUnit,
    ServiceHealth,
    ServiceHealthStatus,
    ServiceLogEntry,
    UnitFinancials,
)
from driveflow.utils.date_utils import add_months, days_between

DEFAULT_SERVICE_INTERVAL_KM = 5_000
SERVICE_INTERVAL_DAYS = 182  # six months
SERVICE_SOON_PERCENT = 25
NEXT_SERVICE_MONTHS = 6


def compute_unit_financials(bookings: Iterable[Booking], service_logs: Iterable[ServiceLogEntry]) -> UnitFinancials:
    """
    Earnings of one unit against what it cost to maintain.

    revenue = total cost of non-cancelled bookings
    ROI = profit / service cost as a whole percentage (half-up), 0 without
    any service cost
    """
    revenue = sum(b.total_cost_cents for b in bookings if b.status != BookingStatus.CANCELLED)
    cost = sum(log.cost_cents for log in service_logs)
    profit = revenue - cost
    roi = (profit * 200 + cost) // (2 * cost) if cost > 0 else 0

    return UnitFinancials(
        revenue_cents=revenue,
        service_cost_cents=cost,
        profit_cents=profit,
        roi_percent=roi,
    )


def assess_service_health(unit: FleetUnit, today: date) -> ServiceHealth:
    """
    Maintenance urgency of a unit.

    Two gauges, each 100% right after a service:
    - mileage: km left before the service interval (default 5,000 km) runs out
    - date: days left before next_service_date, over a six month interval

    Overall health is the lower gauge. A unit is overdue once either gauge
    hits zero, and due soon at 25% or below.
    """
    interval_km = unit.service_interval_km or DEFAULT_SERVICE_INTERVAL_KM
    km_since_service = unit.current_mileage - (unit.last_service_mileage or 0)
    km_remaining = max(0, interval_km - km_since_service)
    mileage_health = km_remaining / interval_km * 100

    days_until_service: Optional[int] = None
    date_health = 100.0
    if unit.next_service_date is not None:
        days_until_service = days_between(today, unit.next_service_date)
        date_health = max(0.0, days_until_service / SERVICE_INTERVAL_DAYS * 100)

    health = min(max(0.0, mileage_health), date_health)

    if km_remaining <= 0 or (days_until_service is not None and days_until_service <= 0):
        status = ServiceHealthStatus.OVERDUE
    elif health <= SERVICE_SOON_PERCENT:
        status = ServiceHealthStatus.SERVICE_SOON
    else:
        status = ServiceHealthStatus.HEALTHY

    return ServiceHealth(
        km_since_service=km_since_service,
        km_remaining=km_remaining,
        days_until_service=days_until_service,
        mileage_health_percent=mileage_health,
        date_health_percent=date_health,
        health_percent=health,
        status=status,
    )


def record_service(
    unit: FleetUnit,
    entry: ServiceLogEntry,
    next_interval_km: int = DEFAULT_SERVICE_INTERVAL_KM,
    next_service_date: Optional[date] = None,
) -> Tuple[ServiceLogEntry, FleetUnit]:
    """
    Validate a service visit and reset the unit's maintenance schedule.

    The odometer reading at service becomes both the current mileage and the
    last-service mileage. Without an explicit next date the next service is
    due six months after this one.

    Returns:
        (entry to store, unit with its new schedule)
    """
    errors = {}
    if not entry.service_type.strip():
        errors["service_type"] = "Service type is required"
    if entry.mileage_at_service < unit.current_mileage:
        errors["mileage_at_service"] = f"Cannot be below the current odometer reading ({unit.current_mileage:,} km)"
    if entry.cost_cents < 0:
        errors["cost_cents"] = "Cost cannot be negative"
    if next_interval_km <= 0:
        errors["next_interval_km"] = "Service interval must be positive"

    next_date = next_service_date or add_months(entry.service_date, NEXT_SERVICE_MONTHS)
    if next_date <= entry.service_date:
        errors["next_service_date"] = "Next service must be after this one"

    if errors:
        raise RecordValidationError("Invalid service log", errors=errors)

    updated = replace(
        unit,
        current_mileage=entry.mileage_at_service,
        last_service_mileage=entry.mileage_at_service,
        service_interval_km=next_interval_km,
        next_service_date=next_date,
    )
    return replace(entry, service_type=entry.service_type.strip()), updated
