"""Domain-specific exceptions"""

from typing import Dict, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ExtensionValidationError(DomainException):
    """Candidate return date or rate cannot produce a valid extension"""

    pass


class AvailabilityConflictError(DomainException):
    """Vehicle is already booked for part of the requested range"""

    pass


class PaymentFailedError(DomainException):
    """Charging the extension difference did not succeed"""

    pass


class WizardStateError(DomainException):
    """Operation is not allowed in the wizard's current step"""

    pass


class RecordValidationError(DomainException):
    """Submitted record breaks a business rule; errors maps field to message"""

    def __init__(self, message: str, errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.errors = errors or {}


class BookingValidationError(RecordValidationError):
    """Booking mutation request is malformed"""

    pass


class DuplicateRecordError(DomainException):
    """Record clashes with one already in the store"""

    pass


class RecordNotFoundError(DomainException):
    """Requested record does not exist in the store"""

    pass


class InvalidRecordError(DomainException):
    """Stored row cannot be mapped to a domain entity"""

    pass


class StoreFetchError(DomainException):
    """Store query failed or is unavailable"""

    pass


class StorageError(DomainException):
    """Object storage upload failed"""

    pass


class ExtensionPersistenceError(DomainException):
    """Extension was paid for but the new return date could not be saved"""

    def __init__(self, message: str, payment):
        super().__init__(message)
        self.payment = payment
