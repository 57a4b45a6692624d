"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional

from driveflow.domain.models import (
    BookingStatus,
    CustomerStatus,
    JobStatus,
    KycStatus,
    OfferingStatus,
    PaymentMethod,
    PaymentStatus,
    PriceModel,
    ServiceHealthStatus,
    UnitStatus,
)


class DomainSchema(BaseModel):
    """Schemas read straight from domain dataclasses"""

    model_config = ConfigDict(from_attributes=True)


# --- Trip extension ---


class QuoteRequest(BaseModel):
    """Request body for POST /v1/extensions/quote"""

    current_end_date: date
    new_end_date: Optional[date] = None
    daily_rate_cents: int = Field(..., gt=0, description="Daily rate in cents")


class QuoteResponse(BaseModel):
    extra_days: int
    extra_cost_cents: int
    vat_cents: int
    total_due_cents: int
    currency: str
    is_valid: bool
    display_total: str


class AvailabilityRequest(BaseModel):
    """Request body for POST /v1/bookings/{booking_id}/extension/availability"""

    new_end_date: date


class AvailabilityResponse(BaseModel):
    booking_id: str
    available: bool
    quote: QuoteResponse
    message: Optional[str] = None


class ExtensionRequest(BaseModel):
    """Request body for POST /v1/bookings/{booking_id}/extension"""

    new_end_date: date
    payment_method: PaymentMethod = PaymentMethod.MPESA


class ExtensionResponse(BaseModel):
    booking_id: str
    previous_end_date: date
    new_end_date: date
    extra_days: int
    charged_cents: int
    payment_reference: Optional[str] = None
    payment_status: PaymentStatus


# --- Bookings ---


class BookingSchema(DomainSchema):
    booking_id: str
    customer_id: str
    unit_id: str
    status: BookingStatus
    start_date: date
    end_date: date
    total_cost_cents: int
    amount_paid_cents: int
    payment_status: PaymentStatus
    created_at: Optional[datetime] = None
    mpesa_code: Optional[str] = None
    customer_name: str
    customer_phone: str
    plate_number: str
    model_name: str


class BookingListResponse(BaseModel):
    bookings: List[BookingSchema]
    total: int


class BookingDetailResponse(BaseModel):
    booking: BookingSchema
    balance_due_cents: int
    is_fully_paid: bool


class BookingStatusRequest(BaseModel):
    status: BookingStatus


class PaymentRecordRequest(BaseModel):
    amount_cents: int = Field(..., gt=0, description="Amount received in cents")
    mpesa_code: Optional[str] = None


class BookingQuoteRequest(BaseModel):
    """Request body for POST /v1/admin/bookings/quote"""

    unit_id: str
    start_date: date
    end_date: date
    delivery_distance_km: int = Field(0, ge=0, description="Delivery distance, 0 for branch pickup")


class BookingPriceSchema(DomainSchema):
    rental_days: int
    daily_rate_cents: int
    subtotal_cents: int
    delivery_fee_cents: int
    total_cost_cents: int


class BookingQuoteResponse(BaseModel):
    unit_id: str
    price: BookingPriceSchema
    available: bool
    currency: str
    display_total: str


class CustomerDetailsRequest(BaseModel):
    """Customer contact and KYC fields, used for new and edited customers"""

    full_name: str
    phone: str
    id_number: str
    email: str = ""
    dl_number: Optional[str] = None
    id_image_url: Optional[str] = None
    dl_image_url: Optional[str] = None


class BookingCreateRequest(BaseModel):
    """
    Request body for POST /v1/admin/bookings.

    Give either customer_id for a returning customer or new_customer to
    register one in the same step.
    """

    customer_id: Optional[str] = None
    new_customer: Optional[CustomerDetailsRequest] = None
    unit_id: str
    start_date: date
    end_date: date
    delivery_distance_km: int = Field(0, ge=0)
    amount_paid_cents: int = Field(0, ge=0, description="Deposit received in cents")
    mpesa_code: Optional[str] = None


class DashboardResponse(DomainSchema):
    total_revenue_cents: int
    active_rentals: int
    pending_requests: int
    fleet_health: int


# --- Customers ---


class CustomerProfileSchema(DomainSchema):
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


class CustomerStatsSchema(DomainSchema):
    total: int
    active: int
    blacklisted: int
    vip: int


class CustomerListResponse(BaseModel):
    customers: List[CustomerProfileSchema]
    stats: CustomerStatsSchema


class CustomerDetailResponse(BaseModel):
    profile: CustomerProfileSchema
    bookings: List[BookingSchema]


# --- Fleet ---


class FleetUnitSchema(DomainSchema):
    unit_id: str
    plate_number: str
    status: UnitStatus
    model_id: Optional[str] = None
    model_name: str
    daily_rate_cents: int
    current_mileage: int
    last_service_mileage: Optional[int] = None
    service_interval_km: Optional[int] = None
    next_service_date: Optional[date] = None


class FleetUnitListResponse(BaseModel):
    units: List[FleetUnitSchema]


class UnitFinancialsSchema(DomainSchema):
    revenue_cents: int
    service_cost_cents: int
    profit_cents: int
    roi_percent: int


class ServiceHealthSchema(DomainSchema):
    km_since_service: int
    km_remaining: int
    days_until_service: Optional[int] = None
    mileage_health_percent: float
    date_health_percent: float
    health_percent: float
    status: ServiceHealthStatus


class ServiceLogSchema(DomainSchema):
    log_id: str
    unit_id: str
    service_date: date
    service_type: str
    mileage_at_service: int
    cost_cents: int
    notes: str


class FleetUnitDetailResponse(BaseModel):
    unit: FleetUnitSchema
    financials: UnitFinancialsSchema
    health: ServiceHealthSchema
    service_logs: List[ServiceLogSchema]
    bookings: List[BookingSchema]


class ServiceLogRequest(BaseModel):
    """Request body for POST /v1/admin/fleet/units/{unit_id}/service-logs"""

    service_date: date
    service_type: str
    mileage_at_service: int = Field(..., ge=0)
    cost_cents: int = Field(0, ge=0)
    notes: str = ""
    next_interval_km: int = Field(5000, gt=0)
    next_service_date: Optional[date] = None


class ServiceLogResponse(BaseModel):
    log: ServiceLogSchema
    unit: FleetUnitSchema
    health: ServiceHealthSchema


# --- Careers & safari ---


class JobSchema(DomainSchema):
    job_id: str
    title: str
    department: str
    location: str
    type: str
    salary_range: str
    description: str
    requirements: List[str]
    status: JobStatus
    applicants_count: int


class JobListResponse(BaseModel):
    jobs: List[JobSchema]


class JobRequest(BaseModel):
    """Request body for creating or editing a career posting"""

    title: str
    department: str = ""
    location: str = "Nairobi, Kenya"
    type: str = "Full-time"
    salary_range: str = ""
    description: str = ""
    requirements: List[str] = Field(default_factory=list)
    status: JobStatus = JobStatus.DRAFT


class OfferingSchema(DomainSchema):
    offering_id: str
    title: str
    description: str
    image_url: str
    duration_days: int
    price_cents: int
    price_model: str
    destinations: List[str]
    inclusions: List[str]
    status: OfferingStatus


class OfferingListResponse(BaseModel):
    offerings: List[OfferingSchema]


class OfferingRequest(BaseModel):
    """Request body for creating or editing a safari package"""

    title: str
    description: str = ""
    image_url: str = ""
    duration_days: int = 3
    price_cents: int = 0
    price_model: str = PriceModel.PER_PERSON.value
    destinations: List[str] = Field(default_factory=list)
    inclusions: List[str] = Field(default_factory=list)
    status: OfferingStatus = OfferingStatus.ACTIVE


# --- Settings & media ---


class SettingsSchema(DomainSchema):
    site_name: str = Field(..., min_length=1)
    currency: str = Field(..., min_length=1, max_length=8)
    support_email: str
    vat_enabled: bool


class MediaUploadResponse(BaseModel):
    url: str
