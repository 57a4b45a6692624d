"""Client-style list filtering: case-insensitive substring search"""

from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from driveflow.domain.models import Booking, CustomerProfile, JobPosting, SafariOffering

T = TypeVar("T")

FieldExtractor = Callable[[T], Iterable[Optional[str]]]


def matches_query(values: Iterable[Optional[str]], query: str) -> bool:
    needle = query.lower()
    return any(needle in value.lower() for value in values if value)


def filter_records(items: Sequence[T], query: Optional[str], fields: FieldExtractor) -> List[T]:
    """
    Keep the items whose searchable fields contain the query.

    A blank query keeps everything. Order is preserved and the input is never
    modified; a new list is always returned.
    """
    if not query or not query.strip():
        return list(items)
    query = query.strip()
    return [item for item in items if matches_query(fields(item), query)]


def booking_fields(booking: Booking) -> Iterable[Optional[str]]:
    return (booking.customer_name, booking.plate_number)


def customer_fields(profile: CustomerProfile) -> Iterable[Optional[str]]:
    return (profile.name, profile.phone, profile.id_number)


def job_fields(job: JobPosting) -> Iterable[Optional[str]]:
    return (job.title, job.department)


def offering_fields(offering: SafariOffering) -> Iterable[Optional[str]]:
    return (offering.title, *offering.destinations)


def filter_bookings(bookings: Sequence[Booking], query: Optional[str]) -> List[Booking]:
    return filter_records(bookings, query, booking_fields)


def filter_customers(profiles: Sequence[CustomerProfile], query: Optional[str]) -> List[CustomerProfile]:
    return filter_records(profiles, query, customer_fields)


def filter_jobs(jobs: Sequence[JobPosting], query: Optional[str]) -> List[JobPosting]:
    return filter_records(jobs, query, job_fields)


def filter_offerings(offerings: Sequence[SafariOffering], query: Optional[str]) -> List[SafariOffering]:
    return filter_records(offerings, query, offering_fields)
