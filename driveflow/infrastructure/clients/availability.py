"""Availability checkers for the extra days of a trip extension"""

import asyncio
from datetime import date
from typing import Optional

from driveflow.config import settings
from driveflow.infrastructure.database.repositories import BookingRepository


class SimulatedAvailabilityChecker:
    """Always reports the vehicle as free after a short delay"""

    def __init__(self, delay_seconds: float | None = None):
        self.delay_seconds = settings.simulated_check_delay_seconds if delay_seconds is None else delay_seconds

    async def check_availability(self, unit_id: Optional[str], range_start: date, range_end: date) -> bool:
        await asyncio.sleep(self.delay_seconds)
        return True


class StoreAvailabilityChecker:
    """Looks for other live bookings on the same unit over the requested range"""

    def __init__(self, bookings: BookingRepository, exclude_booking_id: Optional[str] = None):
        self.bookings = bookings
        self.exclude_booking_id = exclude_booking_id

    async def check_availability(self, unit_id: Optional[str], range_start: date, range_end: date) -> bool:
        if unit_id is None:
            return True
        return not self.bookings.has_overlap(unit_id, range_start, range_end, self.exclude_booking_id)
