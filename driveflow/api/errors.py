"""Translate domain failures into HTTP responses"""

import logging
from typing import NoReturn

from fastapi import HTTPException
from sqlalchemy.orm import Session

from driveflow.domain.exceptions import (
    AvailabilityConflictError,
    DomainException,
    DuplicateRecordError,
    ExtensionPersistenceError,
    ExtensionValidationError,
    InvalidRecordError,
    PaymentFailedError,
    RecordNotFoundError,
    RecordValidationError,
    StorageError,
    StoreFetchError,
    WizardStateError,
)

STATUS_BY_EXCEPTION = {
    ExtensionValidationError: 422,
    RecordValidationError: 422,
    InvalidRecordError: 422,
    AvailabilityConflictError: 409,
    DuplicateRecordError: 409,
    WizardStateError: 409,
    PaymentFailedError: 402,
    RecordNotFoundError: 404,
    StorageError: 502,
    StoreFetchError: 503,
    ExtensionPersistenceError: 503,
}


def status_for(exc: DomainException) -> int:
    for exc_type, status in STATUS_BY_EXCEPTION.items():
        if isinstance(exc, exc_type):
            return status
    return 500


def raise_http_error(exc: DomainException, request_id: str, db: Session | None = None) -> NoReturn:
    """Roll back, log and re-raise a domain failure as an HTTPException"""
    if db is not None:
        db.rollback()

    status = status_for(exc)
    if status >= 500:
        logging.error(f"{type(exc).__name__}: {exc}", extra={"request_id": request_id})
    else:
        logging.warning(f"{type(exc).__name__}: {exc}", extra={"request_id": request_id})

    if isinstance(exc, StoreFetchError):
        detail = "Store unavailable"
    elif isinstance(exc, RecordValidationError) and exc.errors:
        detail = {"message": str(exc), "errors": exc.errors}
    else:
        detail = str(exc)
    raise HTTPException(status_code=status, detail=detail) from exc
