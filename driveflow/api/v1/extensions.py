"""Trip extension endpoints - quote, availability and pay-to-extend"""

import time
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from driveflow.api.v1.schemas import (
    AvailabilityRequest,
    AvailabilityResponse,
    ExtensionRequest,
    ExtensionResponse,
    QuoteRequest,
    QuoteResponse,
)
from driveflow.api.dependencies import (
    CurrentUser,
    get_availability_checker,
    get_current_user,
    get_payment_processor,
    get_pricing_policy,
    get_request_id,
)
from driveflow.api.errors import raise_http_error
from driveflow.infrastructure.database.session import get_db
from driveflow.infrastructure.database.repositories import BookingRepository
from driveflow.domain.bookings import payment_status_for
from driveflow.domain.extension import calculate_extension_quote
from driveflow.domain.models import ExtensionQuote, PricingPolicy
from driveflow.domain.wizard import AvailabilityChecker, ExtensionWizard, PaymentProcessor
from driveflow.domain.exceptions import (
    AvailabilityConflictError,
    DomainException,
    ExtensionPersistenceError,
    ExtensionValidationError,
    PaymentFailedError,
)
from driveflow.infrastructure.observability.metrics import record_extension
from driveflow.infrastructure.observability.logging import log_extension, log_unsaved_extension
from driveflow.utils.money import format_money

router = APIRouter()


def quote_response(quote: ExtensionQuote, policy: PricingPolicy) -> QuoteResponse:
    return QuoteResponse(
        extra_days=quote.extra_days,
        extra_cost_cents=quote.extra_cost_cents,
        vat_cents=quote.vat_cents,
        total_due_cents=quote.total_due_cents,
        currency=policy.currency,
        is_valid=quote.is_valid,
        display_total=format_money(quote.total_due_cents, policy.currency),
    )


@router.post("/extensions/quote", response_model=QuoteResponse)
def quote_extension(
    body: QuoteRequest,
    policy: PricingPolicy = Depends(get_pricing_policy),
):
    """Price a candidate return date. Pure computation, nothing is stored."""
    try:
        quote = calculate_extension_quote(body.current_end_date, body.new_end_date, body.daily_rate_cents, policy)
    except ExtensionValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return quote_response(quote, policy)


@router.post("/bookings/{booking_id}/extension/availability", response_model=AvailabilityResponse)
async def check_extension_availability(
    booking_id: str,
    body: AvailabilityRequest,
    request: Request,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    checker: AvailabilityChecker = Depends(get_availability_checker),
    policy: PricingPolicy = Depends(get_pricing_policy),
):
    """
    First wizard step: quote the new date and check the vehicle is free.

    A conflict is a normal answer here (available=false), not an error.
    """
    request_id = get_request_id(request)

    try:
        trip = BookingRepository(db).fetch_trip(booking_id)
        wizard = ExtensionWizard(trip, checker, payment_processor=None, on_extend_confirm=lambda _: None, policy=policy)
        quote = wizard.select_date(body.new_end_date)
        try:
            await wizard.check_availability()
        except AvailabilityConflictError:
            record_extension("unavailable")
            return AvailabilityResponse(
                booking_id=booking_id,
                available=False,
                quote=quote_response(quote, policy),
                message=wizard.error,
            )
    except ExtensionValidationError as e:
        record_extension("invalid")
        raise_http_error(e, request_id)
    except DomainException as e:
        raise_http_error(e, request_id, db)

    return AvailabilityResponse(booking_id=booking_id, available=True, quote=quote_response(quote, policy))


@router.post("/bookings/{booking_id}/extension", response_model=ExtensionResponse)
async def extend_booking(
    booking_id: str,
    body: ExtensionRequest,
    request: Request,
    idempotency_key: Optional[str] = Header(default=None, max_length=255),
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    checker: AvailabilityChecker = Depends(get_availability_checker),
    processor: PaymentProcessor = Depends(get_payment_processor),
    policy: PricingPolicy = Depends(get_pricing_policy),
):
    """
    Extend a trip end to end.

    Flow:
    1. Load the booking as an extension subject
    2. Validate the new date and check availability of the extra days
    3. Charge the difference (a client Idempotency-Key is forwarded to the processor)
    4. Persist and commit the new return date and charged amount (wizard callback)

    If the charge succeeds but step 4 fails, the response is 503 with the
    payment reference so the charge can be reconciled.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    bookings = BookingRepository(db)

    try:
        trip = bookings.fetch_trip(booking_id)

        def persist_extension(new_end_date: date) -> None:
            booking = bookings.fetch_booking(booking_id)
            charged = wizard.payment.amount_cents
            bookings.apply_extension(
                booking_id,
                new_end_date,
                charged,
                payment_status_for(booking.amount_paid_cents + charged, booking.total_cost_cents + charged),
                reference=wizard.payment.reference,
            )
            db.commit()

        wizard = ExtensionWizard(trip, checker, processor, persist_extension, policy, idempotency_key=idempotency_key)
        wizard.select_date(body.new_end_date)
        await wizard.check_availability()
        payment = await wizard.pay(body.payment_method)

        updated = bookings.fetch_booking(booking_id)

    except ExtensionValidationError as e:
        record_extension("invalid")
        raise_http_error(e, request_id, db)

    except AvailabilityConflictError as e:
        record_extension("unavailable")
        raise_http_error(e, request_id, db)

    except PaymentFailedError as e:
        record_extension("payment_failed")
        raise_http_error(e, request_id, db)

    except ExtensionPersistenceError as e:
        db.rollback()
        record_extension("unsaved")
        log_unsaved_extension(request_id, booking_id, e.payment.reference, e.payment.amount_cents, str(e.__cause__))
        raise HTTPException(
            status_code=503,
            detail={
                "message": "Payment received but the extension could not be saved",
                "payment_reference": e.payment.reference,
                "charged_cents": e.payment.amount_cents,
            },
        ) from e

    except DomainException as e:
        raise_http_error(e, request_id, db)

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    quote = wizard.quote
    duration_ms = (time.time() - start_time) * 1000
    record_extension("extended", quote.extra_days)
    log_extension(request_id, booking_id, "extended", quote.extra_days, payment.amount_cents, duration_ms)

    return ExtensionResponse(
        booking_id=booking_id,
        previous_end_date=trip.current_end_date,
        new_end_date=updated.end_date,
        extra_days=quote.extra_days,
        charged_cents=payment.amount_cents,
        payment_reference=payment.reference,
        payment_status=updated.payment_status,
    )
