"""Dependency injection for FastAPI endpoints"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from driveflow.config import settings
from driveflow.domain.models import PricingPolicy
from driveflow.domain.wizard import AvailabilityChecker, PaymentProcessor
from driveflow.infrastructure.clients.availability import SimulatedAvailabilityChecker, StoreAvailabilityChecker
from driveflow.infrastructure.clients.payment import PaymentGatewayClient, SimulatedPaymentProcessor
from driveflow.infrastructure.clients.storage import StorageClient
from driveflow.infrastructure.database.repositories import BookingRepository, SettingsRepository
from driveflow.infrastructure.database.session import get_db

ROLES = ("admin", "user")


@dataclass(frozen=True)
class CurrentUser:
    """Identity forwarded by the upstream session provider"""

    user_id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> CurrentUser:
    """Resolve the caller from session headers"""
    if not x_user_id or x_user_role not in ROLES:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return CurrentUser(user_id=x_user_id, role=x_user_role)


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def get_pricing_policy(db: Session = Depends(get_db)) -> PricingPolicy:
    """Currency from the site settings row; VAT only when extension_vat_enabled is set"""
    site = SettingsRepository(db).get_settings()
    return site.pricing_policy(settings.vat_rate_bps, charge_vat=settings.extension_vat_enabled)


def get_availability_checker(booking_id: str, db: Session = Depends(get_db)) -> AvailabilityChecker:
    """Checker for extending booking_id, chosen by availability_mode"""
    if settings.availability_mode == "simulated":
        return SimulatedAvailabilityChecker()
    return StoreAvailabilityChecker(BookingRepository(db), exclude_booking_id=booking_id)


def get_payment_processor() -> PaymentProcessor:
    """Payment processor chosen by payment_mode"""
    if settings.payment_mode == "gateway":
        return PaymentGatewayClient()
    return SimulatedPaymentProcessor()


def get_storage_client() -> StorageClient:
    """Provide object storage client instance"""
    return StorageClient()
