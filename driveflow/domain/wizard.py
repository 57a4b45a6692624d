"""Trip extension wizard - select date, check availability, pay, confirm"""

import inspect
import logging
import uuid
from datetime import date
from enum import Enum
from typing import Awaitable, Callable, Optional, Protocol, Union

from driveflow.domain.exceptions import (
    AvailabilityConflictError,
    ExtensionPersistenceError,
    ExtensionValidationError,
    PaymentFailedError,
    WizardStateError,
)
from driveflow.domain.extension import calculate_extension_quote, validate_extension
from driveflow.domain.models import ExtensionQuote, PaymentMethod, PaymentResult, PricingPolicy, Trip
from driveflow.utils.date_utils import day_after

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = (
    "This vehicle is already booked by another client for those dates. "
    "Please select an earlier return date or contact support."
)


class WizardStep(str, Enum):
    SELECTING_DATE = "selecting_date"
    CHECKING_AVAILABILITY = "checking_availability"
    AWAITING_PAYMENT = "awaiting_payment"
    COMPLETED = "completed"


class AvailabilityChecker(Protocol):
    async def check_availability(self, unit_id: Optional[str], range_start: date, range_end: date) -> bool:
        ...


class PaymentProcessor(Protocol):
    async def charge_difference(self, amount_cents: int, method: PaymentMethod, idempotency_key: str) -> PaymentResult:
        ...


ExtendConfirmCallback = Callable[[date], Union[None, Awaitable[None]]]


class ExtensionWizard:
    """
    Two-phase confirmation flow for extending a trip.

    SELECTING_DATE -> CHECKING_AVAILABILITY -> AWAITING_PAYMENT -> COMPLETED
    with CHECKING_AVAILABILITY -> SELECTING_DATE on conflict and
    AWAITING_PAYMENT -> SELECTING_DATE on cancel.

    The wizard never writes the booking itself. On a successful payment it
    hands the new return date to on_extend_confirm and the caller persists it;
    the wizard is COMPLETED only once that callback returns.
    Remote calls are strictly sequential: one in flight at a time.

    Every charge attempt for one payment step carries the same idempotency
    key, so a retry after a timeout cannot charge twice. A definitive decline
    rotates the key for the next attempt.
    """

    def __init__(
        self,
        trip: Trip,
        availability_checker: AvailabilityChecker,
        payment_processor: PaymentProcessor,
        on_extend_confirm: ExtendConfirmCallback,
        policy: Optional[PricingPolicy] = None,
        idempotency_key: Optional[str] = None,
    ):
        self.trip = trip
        self.availability_checker = availability_checker
        self.payment_processor = payment_processor
        self.on_extend_confirm = on_extend_confirm
        self.policy = policy

        self.step = WizardStep.SELECTING_DATE
        self.candidate_end_date: Optional[date] = None
        self.error: Optional[str] = None
        self.payment: Optional[PaymentResult] = None
        self.idempotency_key: Optional[str] = None
        self._requested_key = idempotency_key
        self._busy = False

    @property
    def quote(self) -> ExtensionQuote:
        return calculate_extension_quote(
            self.trip.current_end_date,
            self.candidate_end_date,
            self.trip.daily_rate_cents,
            self.policy,
        )

    @property
    def is_busy(self) -> bool:
        return self._busy

    def select_date(self, candidate_end_date: Optional[date]) -> ExtensionQuote:
        """Set the candidate return date and return the refreshed quote"""
        self._require(WizardStep.SELECTING_DATE)
        self.candidate_end_date = candidate_end_date
        self.error = None
        return self.quote

    async def check_availability(self) -> ExtensionQuote:
        """
        Confirm the selected date and ask whether the vehicle is free.

        Checks the delta range only: the day after the current return date
        through the new return date.

        Raises:
            ExtensionValidationError: new date is not after the current one
            AvailabilityConflictError: vehicle booked for part of the range
        """
        self._require(WizardStep.SELECTING_DATE)
        quote = self.quote
        try:
            validate_extension(quote)
        except ExtensionValidationError as e:
            self.error = str(e)
            raise

        self.error = None
        self.step = WizardStep.CHECKING_AVAILABILITY
        self._busy = True
        try:
            available = await self.availability_checker.check_availability(
                self.trip.unit_id,
                day_after(self.trip.current_end_date),
                self.candidate_end_date,
            )
        except Exception as e:
            self.step = WizardStep.SELECTING_DATE
            self.error = f"Could not verify availability: {e}"
            raise
        finally:
            self._busy = False

        if not available:
            self.step = WizardStep.SELECTING_DATE
            self.error = UNAVAILABLE_MESSAGE
            logger.info(
                "Extension blocked by availability",
                extra={"trip_id": self.trip.trip_id, "new_end_date": self.candidate_end_date.isoformat()},
            )
            raise AvailabilityConflictError(UNAVAILABLE_MESSAGE)

        self.step = WizardStep.AWAITING_PAYMENT
        # a caller-supplied key covers the first payment step only
        self.idempotency_key = self._requested_key or str(uuid.uuid4())
        self._requested_key = None
        return quote

    async def pay(self, method: PaymentMethod = PaymentMethod.MPESA) -> PaymentResult:
        """
        Charge the quoted difference and confirm the extension.

        A failed charge leaves the wizard in AWAITING_PAYMENT so the user can
        retry or cancel. Once a charge succeeds it is never repeated: a retry
        after a failed confirmation only re-runs the callback.

        Raises:
            PaymentFailedError: processor declined or could not be reached
            ExtensionPersistenceError: charge succeeded, callback failed
        """
        self._require(WizardStep.AWAITING_PAYMENT)

        result = self.payment
        if result is None:
            result = await self._charge(method)

        self._busy = True
        try:
            outcome = self.on_extend_confirm(self.candidate_end_date)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            self.error = f"Payment {result.reference} received but the extension was not saved: {e}"
            raise ExtensionPersistenceError(self.error, payment=result) from e
        finally:
            self._busy = False

        self.error = None
        self.step = WizardStep.COMPLETED
        return result

    async def _charge(self, method: PaymentMethod) -> PaymentResult:
        self._busy = True
        try:
            result = await self.payment_processor.charge_difference(
                self.quote.total_due_cents, method, self.idempotency_key
            )
        except PaymentFailedError as e:
            # outcome unknown: the retry reuses this key
            self.error = str(e)
            raise
        finally:
            self._busy = False

        if not result.success:
            self.error = result.message or "Payment was not completed."
            self.idempotency_key = str(uuid.uuid4())
            raise PaymentFailedError(self.error)

        self.payment = result
        return result

    def cancel(self) -> None:
        """Leave the payment step and go back to date selection"""
        self._require(WizardStep.AWAITING_PAYMENT)
        if self.payment is not None:
            raise WizardStateError("Payment already taken; confirm the extension instead")
        self.step = WizardStep.SELECTING_DATE
        self.error = None
        self.idempotency_key = None

    def reopen(self) -> None:
        """Start over, e.g. when the dialog is opened again"""
        if self._busy:
            raise WizardStateError("Cannot reset while a request is in flight")
        if self.step == WizardStep.AWAITING_PAYMENT and self.payment is not None:
            raise WizardStateError("Payment already taken; confirm the extension instead")
        self.step = WizardStep.SELECTING_DATE
        self.candidate_end_date = None
        self.error = None
        self.payment = None
        self.idempotency_key = None

    def _require(self, step: WizardStep) -> None:
        if self._busy:
            raise WizardStateError("Another request is already in flight")
        if self.step != step:
            raise WizardStateError(f"Expected step {step.value}, wizard is at {self.step.value}")
