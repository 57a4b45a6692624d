"""Admin booking endpoints - list, detail, status and payments"""

from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from driveflow.api.v1.schemas import (
    BookingCreateRequest,
    BookingDetailResponse,
    BookingListResponse,
    BookingPriceSchema,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingSchema,
    BookingStatusRequest,
    DashboardResponse,
    PaymentRecordRequest,
)
from driveflow.api.dependencies import CurrentUser, get_request_id, require_admin
from driveflow.api.errors import raise_http_error
from driveflow.api.v1.customers import register_customer
from driveflow.infrastructure.database.session import get_db
from driveflow.infrastructure.database.repositories import (
    BookingRepository,
    CustomerRepository,
    FleetRepository,
    SettingsRepository,
)
from driveflow.domain.bookings import (
    apply_payment,
    balance_due_cents,
    compute_dashboard_metrics,
    is_fully_paid,
    opening_payment_status,
    price_booking,
    render_invoice,
    unit_status_for,
)
from driveflow.domain.exceptions import (
    AvailabilityConflictError,
    BookingValidationError,
    DomainException,
)
from driveflow.domain.filtering import filter_bookings
from driveflow.domain.models import Booking
from driveflow.utils.money import format_money

router = APIRouter()

STATUS_FILTERS = "^(all|pending|active|completed|cancelled)$"


def detail_response(booking: Booking) -> BookingDetailResponse:
    return BookingDetailResponse(
        booking=BookingSchema.model_validate(booking),
        balance_due_cents=balance_due_cents(booking),
        is_fully_paid=is_fully_paid(booking),
    )


@router.get("/bookings", response_model=BookingListResponse)
def list_bookings(
    request: Request,
    status: str = Query("all", pattern=STATUS_FILTERS, description="Booking status filter"),
    q: Optional[str] = Query(None, description="Search customer name or plate number"),
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Bookings newest first, status filtered in the store, text filtered here"""
    try:
        bookings = BookingRepository(db).list_bookings(status)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))

    filtered = filter_bookings(bookings, q)
    return BookingListResponse(
        bookings=[BookingSchema.model_validate(b) for b in filtered],
        total=len(filtered),
    )


@router.get("/bookings/{booking_id}", response_model=BookingDetailResponse)
def get_booking(
    booking_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        booking = BookingRepository(db).fetch_booking(booking_id)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return detail_response(booking)


@router.post("/bookings/{booking_id}/status", response_model=BookingDetailResponse)
def update_booking_status(
    booking_id: str,
    body: BookingStatusRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Change booking status; the fleet unit follows (rented/cleaning/available)"""
    try:
        booking = BookingRepository(db).update_status(booking_id, body.status, unit_status_for(body.status))
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return detail_response(booking)


@router.post("/bookings/{booking_id}/payments", response_model=BookingDetailResponse)
def record_booking_payment(
    booking_id: str,
    body: PaymentRecordRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Record a payment received outside the platform (e.g. M-Pesa till)"""
    repo = BookingRepository(db)
    try:
        booking = repo.fetch_booking(booking_id)
        amount_paid, payment_status = apply_payment(booking, body.amount_cents)
        booking = repo.record_payment(booking_id, amount_paid, payment_status, body.mpesa_code)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return detail_response(booking)


@router.get("/dashboard", response_model=DashboardResponse)
def get_dashboard(
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    repo = BookingRepository(db)
    try:
        metrics = compute_dashboard_metrics(FleetRepository(db).list_units(), repo.list_bookings())
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return DashboardResponse.model_validate(metrics)


@router.post("/bookings/quote", response_model=BookingQuoteResponse)
def quote_booking(
    body: BookingQuoteRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Price a rental at the unit's model rate and check the unit is free for the dates"""
    try:
        unit = FleetRepository(db).fetch_unit(body.unit_id)
        price = price_booking(body.start_date, body.end_date, unit.daily_rate_cents, body.delivery_distance_km)
        available = not BookingRepository(db).has_overlap(unit.unit_id, body.start_date, body.end_date)
        currency = SettingsRepository(db).get_settings().currency
    except DomainException as e:
        raise_http_error(e, get_request_id(request))

    return BookingQuoteResponse(
        unit_id=unit.unit_id,
        price=BookingPriceSchema.model_validate(price),
        available=available,
        currency=currency,
        display_total=format_money(price.total_cost_cents, currency),
    )


@router.post("/bookings", response_model=BookingDetailResponse, status_code=201)
def create_booking(
    body: BookingCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """
    Walk-in booking from the admin desk.

    The customer is either an existing one (customer_id) or registered in the
    same transaction (new_customer). The unit must be free for the whole
    period; the deposit sets the opening payment status.
    """
    request_id = get_request_id(request)
    repo = BookingRepository(db)
    try:
        if (body.customer_id is None) == (body.new_customer is None):
            raise BookingValidationError(
                "Choose an existing customer or register a new one",
                errors={"customer": "Give exactly one of customer_id or new_customer"},
            )

        unit = FleetRepository(db).fetch_unit(body.unit_id)
        price = price_booking(body.start_date, body.end_date, unit.daily_rate_cents, body.delivery_distance_km)
        payment_status = opening_payment_status(body.amount_paid_cents, price.total_cost_cents)

        if repo.has_overlap(unit.unit_id, body.start_date, body.end_date):
            raise AvailabilityConflictError(f"{unit.plate_number} is already booked for these dates")

        if body.new_customer is not None:
            customer_id = register_customer(CustomerRepository(db), body.new_customer).customer_id
        else:
            customer_id = CustomerRepository(db).fetch_customer_with_bookings(body.customer_id).customer_id

        booking = repo.create_booking(
            customer_id=customer_id,
            unit_id=unit.unit_id,
            start_date=body.start_date,
            end_date=body.end_date,
            total_cost_cents=price.total_cost_cents,
            amount_paid_cents=body.amount_paid_cents,
            payment_status=payment_status,
            mpesa_code=body.mpesa_code,
        )
        db.commit()
    except DomainException as e:
        raise_http_error(e, request_id, db)

    return detail_response(booking)


@router.get("/bookings/{booking_id}/invoice", response_class=PlainTextResponse)
def get_booking_invoice(
    booking_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        booking = BookingRepository(db).fetch_booking(booking_id)
        customer = CustomerRepository(db).fetch_customer_with_bookings(booking.customer_id)
        currency = SettingsRepository(db).get_settings().currency
    except DomainException as e:
        raise_http_error(e, get_request_id(request))

    invoice = render_invoice(booking, customer.id_number, currency, datetime.now(timezone.utc))
    return PlainTextResponse(
        invoice,
        headers={"Content-Disposition": f'attachment; filename="invoice-{booking_id}.txt"'},
    )
