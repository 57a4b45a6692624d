"""Customer metrics - derive CRM fields from booking history, and vet new customer details"""

import re
from dataclasses import replace
from typing import Iterable, List, Optional

from driveflow.domain.exceptions import RecordValidationError
from driveflow.domain.models import (
    BookingStatus,
    Customer,
    CustomerDetails,
    CustomerProfile,
    CustomerStats,
    CustomerStatus,
    KycStatus,
)

DEFAULT_TRUST_SCORE = 100
TRUST_BONUS_PER_TRIP = 2
TRUST_PENALTY_PER_CANCEL = 20
LOW_TRUST_THRESHOLD = 60
UNVERIFIED_START_SCORE = 80

E164_PHONE = re.compile(r"^\+[1-9]\d{9,14}$")
LOCAL_PREFIXES = ("07", "01")
KENYA_DIALING_CODE = "+254"
MIN_NAME_LENGTH = 3
MIN_ID_LENGTH = 6


def calculate_trust_score(base_score: int | None, completed_count: int, cancelled_count: int) -> int:
    """
    Linear reputation adjustment, clamped to 0-100.

    +2 for every non-cancelled booking, -20 for every cancellation.
    A customer without a stored base score starts at 100.
    """
    score = DEFAULT_TRUST_SCORE if base_score is None else base_score
    score += TRUST_BONUS_PER_TRIP * completed_count
    score -= TRUST_PENALTY_PER_CANCEL * cancelled_count
    return min(100, max(0, score))


def determine_kyc_status(id_image_url: str | None, dl_image_url: str | None) -> KycStatus:
    """Verified only once both the ID and the driving licence images are on file"""
    if id_image_url and dl_image_url:
        return KycStatus.VERIFIED
    return KycStatus.PENDING


def build_customer_profile(customer: Customer) -> CustomerProfile:
    """
    Fold a customer's bookings into the derived CRM view.

    Pure and order-independent: every aggregate is a sum or a count, and a
    missing bookings list counts as no bookings.
    """
    bookings = customer.bookings or []

    cancelled_count = sum(1 for b in bookings if b.status == BookingStatus.CANCELLED)
    valid = [b for b in bookings if b.status != BookingStatus.CANCELLED]
    total_spent = sum(b.total_cost_cents or 0 for b in valid)
    rentals_count = len(bookings)

    trust_score = calculate_trust_score(customer.base_trust_score, len(valid), cancelled_count)

    return CustomerProfile(
        customer_id=customer.customer_id,
        name=customer.full_name,
        phone=customer.phone,
        email=customer.email or "",
        id_number=customer.id_number,
        status=customer.status,
        total_spent_cents=total_spent,
        rentals_count=rentals_count,
        cancelled_count=cancelled_count,
        trust_score=trust_score,
        kyc_status=determine_kyc_status(customer.id_image_url, customer.dl_image_url),
        average_per_trip_cents=total_spent // max(rentals_count, 1),
        requires_higher_deposit=trust_score < LOW_TRUST_THRESHOLD,
        joined_date=customer.created_at.date() if customer.created_at else None,
    )


def build_customer_profiles(customers: Iterable[Customer]) -> List[CustomerProfile]:
    return [build_customer_profile(c) for c in customers]


def summarize_customers(profiles: Iterable[CustomerProfile], vip_threshold_cents: int) -> CustomerStats:
    """Header counts for the customer list"""
    profiles = list(profiles)
    return CustomerStats(
        total=len(profiles),
        active=sum(1 for p in profiles if p.status == CustomerStatus.ACTIVE),
        blacklisted=sum(1 for p in profiles if p.status == CustomerStatus.BLACKLISTED),
        vip=sum(1 for p in profiles if p.total_spent_cents > vip_threshold_cents),
    )


def toggle_customer_status(status: CustomerStatus) -> CustomerStatus:
    if status == CustomerStatus.ACTIVE:
        return CustomerStatus.BLACKLISTED
    return CustomerStatus.ACTIVE


def format_customer_name(name: str) -> str:
    """Capitalise the first letter of every word, leaving the rest as typed"""
    return re.sub(r"\b\w", lambda m: m.group().upper(), name.strip())


def normalize_phone(phone: str) -> str:
    """Keep digits and '+', and turn a local 07/01 number into +254 form"""
    clean = re.sub(r"[^0-9+]", "", phone)
    if clean.startswith(LOCAL_PREFIXES):
        clean = KENYA_DIALING_CODE + clean[1:]
    return clean


def normalize_id_number(id_number: str) -> str:
    return re.sub(r"[^A-Z0-9]", "", id_number.upper())


def prepare_customer_details(details: CustomerDetails) -> CustomerDetails:
    """
    Normalise and validate customer details from the admin forms.

    Raises:
        RecordValidationError: with one message per offending field
    """
    cleaned = replace(
        details,
        full_name=format_customer_name(details.full_name),
        phone=normalize_phone(details.phone),
        id_number=normalize_id_number(details.id_number),
        email=details.email.strip(),
        dl_number=details.dl_number.strip().upper() if details.dl_number and details.dl_number.strip() else None,
    )

    errors = {}
    if len(cleaned.full_name) < MIN_NAME_LENGTH:
        errors["full_name"] = "Full name required"
    if not E164_PHONE.match(cleaned.phone):
        errors["phone"] = "Invalid format (e.g. +254...)"
    if len(cleaned.id_number) < MIN_ID_LENGTH:
        errors["id_number"] = "Valid ID required"
    if errors:
        raise RecordValidationError("Invalid customer details", errors=errors)

    return cleaned


def initial_trust_score(id_image_url: Optional[str], dl_image_url: Optional[str]) -> int:
    """New customers with both documents on file start fully trusted"""
    if id_image_url and dl_image_url:
        return DEFAULT_TRUST_SCORE
    return UNVERIFIED_START_SCORE
