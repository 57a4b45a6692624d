"""Unit tests for booking pricing, payments, status sync, invoices and dashboard totals"""

import pytest
from datetime import date, datetime
from driveflow.domain.bookings import (
    apply_payment,
    balance_due_cents,
    compute_dashboard_metrics,
    is_fully_paid,
    opening_payment_status,
    payment_status_for,
    price_booking,
    render_invoice,
    rental_days,
    unit_status_for,
)
from driveflow.domain.exceptions import BookingValidationError
from driveflow.domain.models import BookingStatus, FleetUnit, PaymentStatus, UnitStatus


def test_partial_then_full_payment(booking_factory):
    booking = booking_factory("b1", BookingStatus.ACTIVE, 1_000_000)
    booking.amount_paid_cents = 0

    paid, status = apply_payment(booking, 400_000)
    assert (paid, status) == (400_000, PaymentStatus.PARTIAL)

    booking.amount_paid_cents = paid
    assert balance_due_cents(booking) == 600_000
    assert not is_fully_paid(booking)

    paid, status = apply_payment(booking, 600_000)
    assert (paid, status) == (1_000_000, PaymentStatus.PAID)


def test_overpayment_is_paid(booking_factory):
    booking = booking_factory("b1", BookingStatus.ACTIVE, 1_000_000)
    _, status = apply_payment(booking, 1)
    assert status == PaymentStatus.PAID


@pytest.mark.parametrize("amount", [0, -100])
def test_non_positive_payment_rejected(booking_factory, amount):
    with pytest.raises(BookingValidationError):
        apply_payment(booking_factory("b1"), amount)


def test_payment_status_for_nothing_paid():
    assert payment_status_for(0, 1_000) == PaymentStatus.UNPAID


@pytest.mark.parametrize(
    "booking_status, unit_status",
    [
        (BookingStatus.ACTIVE, UnitStatus.RENTED),
        (BookingStatus.PENDING, UnitStatus.RENTED),
        (BookingStatus.COMPLETED, UnitStatus.CLEANING),
        (BookingStatus.CANCELLED, UnitStatus.AVAILABLE),
    ],
)
def test_unit_status_follows_booking(booking_status, unit_status):
    assert unit_status_for(booking_status) == unit_status


def test_dashboard_metrics(booking_factory):
    units = [
        FleetUnit("u1", "KDA 1", UnitStatus.RENTED),
        FleetUnit("u2", "KDA 2", UnitStatus.AVAILABLE),
        FleetUnit("u3", "KDA 3", UnitStatus.MAINTENANCE),
        FleetUnit("u4", "KDA 4", UnitStatus.RENTED),
    ]
    bookings = [
        booking_factory("b1", BookingStatus.ACTIVE, 1_000_000),
        booking_factory("b2", BookingStatus.PENDING, 500_000),
        booking_factory("b3", BookingStatus.CANCELLED, 9_000_000),
    ]

    metrics = compute_dashboard_metrics(units, bookings)

    assert metrics.total_revenue_cents == 1_500_000
    assert metrics.active_rentals == 2
    assert metrics.pending_requests == 1
    assert metrics.fleet_health == 75


def test_dashboard_without_units_is_healthy():
    assert compute_dashboard_metrics([], []).fleet_health == 100


def test_price_booking_example():
    """8 days at KES 5,000/day -> KES 40,000"""
    price = price_booking(date(2025, 11, 20), date(2025, 11, 28), 500_000)

    assert price.rental_days == 8
    assert price.subtotal_cents == 4_000_000
    assert price.delivery_fee_cents == 0
    assert price.total_cost_cents == 4_000_000


def test_price_booking_adds_delivery_fee():
    """15 km at KES 100/km on top of the rental"""
    price = price_booking(date(2025, 11, 20), date(2025, 11, 22), 500_000, delivery_distance_km=15)

    assert price.delivery_fee_cents == 150_000
    assert price.total_cost_cents == 1_150_000


def test_same_day_rental_is_one_day():
    assert rental_days(date(2025, 11, 20), date(2025, 11, 20)) == 1
    assert price_booking(date(2025, 11, 20), date(2025, 11, 20), 500_000).total_cost_cents == 500_000


def test_partial_day_rounds_up():
    assert rental_days(datetime(2025, 11, 20, 10, 0), datetime(2025, 11, 21, 11, 0)) == 2


def test_price_booking_rejects_return_before_pickup():
    with pytest.raises(BookingValidationError) as exc_info:
        price_booking(date(2025, 11, 28), date(2025, 11, 20), 500_000)
    assert "end_date" in exc_info.value.errors


@pytest.mark.parametrize("rate, distance", [(0, 0), (-1, 0), (500_000, -5)])
def test_price_booking_rejects_bad_inputs(rate, distance):
    with pytest.raises(BookingValidationError):
        price_booking(date(2025, 11, 20), date(2025, 11, 22), rate, distance)


@pytest.mark.parametrize(
    "paid, status",
    [(0, PaymentStatus.UNPAID), (1_000_000, PaymentStatus.PARTIAL), (4_000_000, PaymentStatus.PAID)],
)
def test_opening_payment_status(paid, status):
    assert opening_payment_status(paid, 4_000_000) == status


def test_opening_payment_status_rejects_negative_deposit():
    with pytest.raises(BookingValidationError):
        opening_payment_status(-1, 4_000_000)


def test_render_invoice(booking_factory):
    booking = booking_factory("b1", BookingStatus.ACTIVE, 4_000_000)
    booking.amount_paid_cents = 1_500_000
    booking.model_name = "Toyota Land Cruiser"

    invoice = render_invoice(booking, "ID12345", "KES", datetime(2025, 11, 20, 9, 5))

    lines = invoice.splitlines()
    assert lines[0] == "DRIVEFLOW RENTALS - INVOICE"
    assert "Client: John Smith" in lines
    assert "ID: ID12345" in lines
    assert "Vehicle: Toyota Land Cruiser" in lines
    assert "Plate: KDA 123A" in lines
    assert "Total: KES 40,000" in lines
    assert "Paid: KES 15,000" in lines
    assert "Bal: KES 25,000" in lines
    assert lines[-1] == "Date: 20/11/2025 09:05"
