"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class BookingStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


class CustomerStatus(str, Enum):
    ACTIVE = "active"
    BLACKLISTED = "blacklisted"


class KycStatus(str, Enum):
    VERIFIED = "verified"
    PENDING = "pending"


class UnitStatus(str, Enum):
    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"
    CLEANING = "cleaning"


class JobStatus(str, Enum):
    ACTIVE = "active"
    DRAFT = "draft"
    CLOSED = "closed"


class OfferingStatus(str, Enum):
    ACTIVE = "active"
    DRAFT = "draft"
    ARCHIVED = "archived"


class PaymentMethod(str, Enum):
    MPESA = "mpesa"
    CARD = "card"


class PriceModel(str, Enum):
    PER_PERSON = "per_person"
    PER_VEHICLE = "per_vehicle"
    TOTAL_PACKAGE = "total_package"


class ServiceHealthStatus(str, Enum):
    HEALTHY = "healthy"
    SERVICE_SOON = "service_soon"
    OVERDUE = "overdue"


@dataclass(frozen=True)
class PricingPolicy:
    """Currency and tax rules applied to quoted amounts"""

    currency: str = "KES"
    vat_enabled: bool = False
    vat_rate_bps: int = 1600


@dataclass
class Trip:
    """Rental period offered for extension"""

    trip_id: str
    car_name: str
    plate: str
    current_end_date: date
    daily_rate_cents: int
    unit_id: Optional[str] = None


@dataclass(frozen=True)
class ExtensionQuote:
    """Extra days and cost for a candidate return date. Never persisted."""

    extra_days: int = 0
    extra_cost_cents: int = 0
    vat_cents: int = 0
    total_due_cents: int = 0

    @property
    def is_valid(self) -> bool:
        return self.extra_days > 0


@dataclass
class PaymentResult:
    """Outcome of charging the extension difference"""

    success: bool
    amount_cents: int
    method: PaymentMethod
    reference: Optional[str] = None
    message: Optional[str] = None


@dataclass
class Booking:
    """Reservation of a fleet unit by a customer"""

    booking_id: str
    customer_id: str
    unit_id: str
    status: BookingStatus
    start_date: date
    end_date: date
    total_cost_cents: int
    amount_paid_cents: int = 0
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    created_at: Optional[datetime] = None
    mpesa_code: Optional[str] = None
    customer_name: str = ""
    customer_phone: str = ""
    plate_number: str = ""
    model_name: str = ""


@dataclass
class Customer:
    """Stored customer record with its booking history"""

    customer_id: str
    full_name: str
    phone: str
    id_number: str
    email: str = ""
    status: CustomerStatus = CustomerStatus.ACTIVE
    base_trust_score: Optional[int] = None
    created_at: Optional[datetime] = None
    id_image_url: Optional[str] = None
    dl_image_url: Optional[str] = None
    dl_number: Optional[str] = None
    bookings: Optional[List[Booking]] = None


@dataclass
class CustomerDetails:
    """Editable customer fields as submitted from the admin forms"""

    full_name: str
    phone: str
    id_number: str
    email: str = ""
    dl_number: Optional[str] = None
    id_image_url: Optional[str] = None
    dl_image_url: Optional[str] = None


@dataclass(frozen=True)
class CustomerProfile:
    """Derived CRM view of a customer"""

    customer_id: str
    name: str
    phone: str
    email: str
    id_number: str
    status: CustomerStatus
    total_spent_cents: int
    rentals_count: int
    cancelled_count: int
    trust_score: int
    kyc_status: KycStatus
    average_per_trip_cents: int
    requires_higher_deposit: bool
    joined_date: Optional[date] = None


@dataclass(frozen=True)
class CustomerStats:
    total: int
    active: int
    blacklisted: int
    vip: int


@dataclass
class FleetUnit:
    unit_id: str
    plate_number: str
    status: UnitStatus
    model_id: Optional[str] = None
    model_name: str = ""
    daily_rate_cents: int = 0
    current_mileage: int = 0
    last_service_mileage: Optional[int] = None
    service_interval_km: Optional[int] = None
    next_service_date: Optional[date] = None


@dataclass
class ServiceLogEntry:
    """One maintenance visit recorded against a unit"""

    log_id: str
    unit_id: str
    service_date: date
    service_type: str
    mileage_at_service: int
    cost_cents: int
    notes: str = ""


@dataclass(frozen=True)
class UnitFinancials:
    revenue_cents: int
    service_cost_cents: int
    profit_cents: int
    roi_percent: int


@dataclass(frozen=True)
class ServiceHealth:
    """Maintenance urgency from mileage and the scheduled service date"""

    km_since_service: int
    km_remaining: int
    days_until_service: Optional[int]
    mileage_health_percent: float
    date_health_percent: float
    health_percent: float
    status: ServiceHealthStatus


@dataclass(frozen=True)
class BookingPrice:
    """Price of a new rental: whole days at the model rate plus any delivery fee"""

    rental_days: int
    daily_rate_cents: int
    subtotal_cents: int
    delivery_fee_cents: int
    total_cost_cents: int


@dataclass(frozen=True)
class DashboardMetrics:
    total_revenue_cents: int
    active_rentals: int
    pending_requests: int
    fleet_health: int  # percentage


@dataclass
class JobPosting:
    job_id: str
    title: str
    department: str
    location: str = "Nairobi, Kenya"
    type: str = "Full-time"
    salary_range: str = ""
    description: str = ""
    requirements: List[str] = field(default_factory=list)
    status: JobStatus = JobStatus.DRAFT
    applicants_count: int = 0


@dataclass
class SafariOffering:
    offering_id: str
    title: str
    description: str = ""
    image_url: str = ""
    duration_days: int = 3
    price_cents: int = 0
    price_model: str = "per_person"
    destinations: List[str] = field(default_factory=list)
    inclusions: List[str] = field(default_factory=list)
    status: OfferingStatus = OfferingStatus.ACTIVE


@dataclass
class SiteSettings:
    site_name: str = "Driveflow"
    currency: str = "KES"
    support_email: str = "help@driveflow.co.ke"
    vat_enabled: bool = True

    def pricing_policy(self, vat_rate_bps: int = 1600, charge_vat: bool = False) -> PricingPolicy:
        """VAT applies only when the site setting is on and the caller opts in"""
        return PricingPolicy(
            currency=self.currency,
            vat_enabled=self.vat_enabled and charge_vat,
            vat_rate_bps=vat_rate_bps,
        )
