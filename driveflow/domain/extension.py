"""Trip extension pricing - extra days and cost for a new return date"""

from datetime import date
from typing import Optional

from driveflow.domain.exceptions import ExtensionValidationError
from driveflow.domain.models import ExtensionQuote, PricingPolicy
from driveflow.utils.date_utils import days_between
from driveflow.utils.money import percentage_of

INVALID_RETURN_DATE_MESSAGE = "New return date must be after current return date."


def calculate_extension_quote(
    current_end_date: date,
    candidate_end_date: Optional[date],
    daily_rate_cents: int,
    policy: Optional[PricingPolicy] = None,
) -> ExtensionQuote:
    """
    Quote the additional rental days and cost for a candidate return date.

    Day counting rule:
    - Both dates are reduced to calendar dates, so the count is the number of
      whole days between them. For whole dates this equals the ceiling of the
      elapsed time in days, and time-of-day or DST shifts cannot change it.
    - A missing candidate, or one on/before the current return date, yields an
      empty quote (0 days, 0 cost) rather than an error.

    Cost:
    - extra_cost_cents = extra_days * daily_rate_cents, exact integer arithmetic
    - VAT is added as a separate line only when the policy enables it

    Example:
        current 2025-11-28, candidate 2025-12-01, rate 500_000 cents/day
        -> 3 days, 1_500_000 cents
    """
    if daily_rate_cents <= 0:
        raise ExtensionValidationError(f"Daily rate must be positive, got {daily_rate_cents}")

    if candidate_end_date is None:
        return ExtensionQuote()

    extra_days = days_between(current_end_date, candidate_end_date)
    if extra_days <= 0:
        return ExtensionQuote()

    extra_cost = extra_days * daily_rate_cents
    vat = percentage_of(extra_cost, policy.vat_rate_bps) if policy and policy.vat_enabled else 0

    return ExtensionQuote(
        extra_days=extra_days,
        extra_cost_cents=extra_cost,
        vat_cents=vat,
        total_due_cents=extra_cost + vat,
    )


def validate_extension(quote: ExtensionQuote) -> None:
    """Block progression for a quote that does not extend the trip"""
    if not quote.is_valid:
        raise ExtensionValidationError(INVALID_RETURN_DATE_MESSAGE)
