"""Booking rules - pricing, balances, payments, fleet status sync and dashboard totals"""

from datetime import date, datetime
from typing import Iterable, Tuple

from driveflow.domain.exceptions import BookingValidationError
from driveflow.domain.models import (
    Booking,
    BookingPrice,
    BookingStatus,
    DashboardMetrics,
    FleetUnit,
    PaymentStatus,
    UnitStatus,
)
from driveflow.utils.date_utils import ceil_days_between, days_between
from driveflow.utils.money import format_money

HEALTHY_UNIT_STATUSES = (UnitStatus.AVAILABLE, UnitStatus.RENTED)
MIN_RENTAL_DAYS = 1
DELIVERY_FEE_PER_KM_CENTS = 10_000  # KES 100/km
INVOICE_RULE = "-" * 27


def rental_days(start: date, end: date) -> int:
    """Billable days: the span rounded up to whole days, never less than one"""
    return max(ceil_days_between(start, end), MIN_RENTAL_DAYS)


def price_booking(
    start: date,
    end: date,
    daily_rate_cents: int,
    delivery_distance_km: int = 0,
) -> BookingPrice:
    """
    Price a new rental.

    total = rental_days * daily rate + delivery_distance_km * KES 100.
    A same-day rental is billed as one day.

    Example:
        2025-11-20 -> 2025-11-28 at 500_000 cents/day -> 8 days, 4_000_000 cents
    """
    if daily_rate_cents <= 0:
        raise BookingValidationError(f"Daily rate must be positive, got {daily_rate_cents}")
    if delivery_distance_km < 0:
        raise BookingValidationError(f"Delivery distance cannot be negative, got {delivery_distance_km}")
    if days_between(start, end) < 0:
        raise BookingValidationError(
            "Return date must not be before pickup date",
            errors={"end_date": "Must be on or after the start date"},
        )

    days = rental_days(start, end)
    subtotal = days * daily_rate_cents
    delivery_fee = delivery_distance_km * DELIVERY_FEE_PER_KM_CENTS

    return BookingPrice(
        rental_days=days,
        daily_rate_cents=daily_rate_cents,
        subtotal_cents=subtotal,
        delivery_fee_cents=delivery_fee,
        total_cost_cents=subtotal + delivery_fee,
    )


def opening_payment_status(amount_paid_cents: int, total_cost_cents: int) -> PaymentStatus:
    """Payment status for the deposit taken when a booking is created"""
    if amount_paid_cents < 0:
        raise BookingValidationError(
            f"Amount paid cannot be negative, got {amount_paid_cents}",
            errors={"amount_paid_cents": "Must be zero or more"},
        )
    return payment_status_for(amount_paid_cents, total_cost_cents)


def balance_due_cents(booking: Booking) -> int:
    return booking.total_cost_cents - booking.amount_paid_cents


def is_fully_paid(booking: Booking) -> bool:
    return balance_due_cents(booking) <= 0


def payment_status_for(amount_paid_cents: int, total_cost_cents: int) -> PaymentStatus:
    if amount_paid_cents <= 0:
        return PaymentStatus.UNPAID
    if amount_paid_cents >= total_cost_cents:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIAL


def apply_payment(booking: Booking, amount_cents: int) -> Tuple[int, PaymentStatus]:
    """
    Add a payment to a booking.

    Returns:
        (new amount paid, new payment status)
    """
    if amount_cents <= 0:
        raise BookingValidationError(f"Payment amount must be positive, got {amount_cents}")

    new_total_paid = booking.amount_paid_cents + amount_cents
    return new_total_paid, payment_status_for(new_total_paid, booking.total_cost_cents)


def unit_status_for(booking_status: BookingStatus) -> UnitStatus:
    """Fleet unit status that follows a booking status change"""
    if booking_status == BookingStatus.COMPLETED:
        return UnitStatus.CLEANING  # returned cars go through cleaning first
    if booking_status == BookingStatus.CANCELLED:
        return UnitStatus.AVAILABLE
    return UnitStatus.RENTED


def compute_dashboard_metrics(units: Iterable[FleetUnit], bookings: Iterable[Booking]) -> DashboardMetrics:
    units = list(units)
    bookings = list(bookings)

    healthy = sum(1 for u in units if u.status in HEALTHY_UNIT_STATUSES)
    fleet_health = round(healthy / len(units) * 100) if units else 100

    return DashboardMetrics(
        total_revenue_cents=sum(b.total_cost_cents for b in bookings if b.status != BookingStatus.CANCELLED),
        active_rentals=sum(1 for u in units if u.status == UnitStatus.RENTED),
        pending_requests=sum(1 for b in bookings if b.status == BookingStatus.PENDING),
        fleet_health=fleet_health,
    )


def render_invoice(booking: Booking, id_number: str, currency: str, issued_at: datetime) -> str:
    """Plain-text invoice handed to the customer at checkout"""
    lines = [
        "DRIVEFLOW RENTALS - INVOICE",
        INVOICE_RULE,
        f"Client: {booking.customer_name}",
        f"ID: {id_number}",
        f"Vehicle: {booking.model_name}",
        f"Plate: {booking.plate_number}",
        f"Period: {booking.start_date.isoformat()} to {booking.end_date.isoformat()}",
        INVOICE_RULE,
        f"Total: {format_money(booking.total_cost_cents, currency)}",
        f"Paid: {format_money(booking.amount_paid_cents, currency)}",
        f"Bal: {format_money(balance_due_cents(booking), currency)}",
        INVOICE_RULE,
        f"Date: {issued_at.strftime('%d/%m/%Y %H:%M')}",
    ]
    return "\n".join(lines) + "\n"
