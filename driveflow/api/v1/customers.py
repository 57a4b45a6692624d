"""Admin customer endpoints - CRM list, profile, registration, edits and blacklist toggle"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from driveflow.api.v1.schemas import (
    BookingSchema,
    CustomerDetailResponse,
    CustomerDetailsRequest,
    CustomerListResponse,
    CustomerProfileSchema,
    CustomerStatsSchema,
)
from driveflow.api.dependencies import CurrentUser, get_request_id, require_admin
from driveflow.api.errors import raise_http_error
from driveflow.config import settings
from driveflow.infrastructure.database.session import get_db
from driveflow.infrastructure.database.repositories import CustomerRepository
from driveflow.domain.customers import (
    build_customer_profile,
    build_customer_profiles,
    initial_trust_score,
    prepare_customer_details,
    summarize_customers,
    toggle_customer_status,
)
from driveflow.domain.exceptions import DomainException, DuplicateRecordError
from driveflow.domain.filtering import filter_customers
from driveflow.domain.models import Customer, CustomerDetails

router = APIRouter()


def to_customer_details(body: CustomerDetailsRequest) -> CustomerDetails:
    return prepare_customer_details(CustomerDetails(**body.model_dump()))


def register_customer(repo: CustomerRepository, body: CustomerDetailsRequest) -> Customer:
    """Validate and insert a new customer; ID numbers are unique"""
    details = to_customer_details(body)
    if repo.id_number_exists(details.id_number):
        raise DuplicateRecordError("This ID Number is already registered.")
    return repo.create_customer(details, initial_trust_score(details.id_image_url, details.dl_image_url))


def detail_response(customer: Customer) -> CustomerDetailResponse:
    return CustomerDetailResponse(
        profile=CustomerProfileSchema.model_validate(build_customer_profile(customer)),
        bookings=[BookingSchema.model_validate(b) for b in customer.bookings or []],
    )


@router.get("/customers", response_model=CustomerListResponse)
def list_customers(
    request: Request,
    q: Optional[str] = Query(None, description="Search name, phone or ID number"),
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """
    Customer profiles with derived spend, trust score and KYC status.

    Header stats cover every customer; the search only narrows the list.
    """
    try:
        customers = CustomerRepository(db).list_customers()
    except DomainException as e:
        raise_http_error(e, get_request_id(request))

    profiles = build_customer_profiles(customers)
    stats = summarize_customers(profiles, settings.vip_threshold_cents)

    return CustomerListResponse(
        customers=[CustomerProfileSchema.model_validate(p) for p in filter_customers(profiles, q)],
        stats=CustomerStatsSchema.model_validate(stats),
    )


@router.get("/customers/{customer_id}", response_model=CustomerDetailResponse)
def get_customer(
    customer_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        customer = CustomerRepository(db).fetch_customer_with_bookings(customer_id)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return detail_response(customer)


@router.post("/customers/{customer_id}/toggle-status", response_model=CustomerDetailResponse)
def toggle_status(
    customer_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Blacklist an active customer or re-activate a blacklisted one"""
    repo = CustomerRepository(db)
    try:
        customer = repo.fetch_customer_with_bookings(customer_id)
        customer = repo.set_status(customer_id, toggle_customer_status(customer.status))
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return detail_response(customer)


@router.post("/customers", response_model=CustomerDetailResponse, status_code=201)
def create_customer(
    body: CustomerDetailsRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Register a customer; both KYC documents on file start them at full trust"""
    try:
        customer = register_customer(CustomerRepository(db), body)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return detail_response(customer)


@router.put("/customers/{customer_id}", response_model=CustomerDetailResponse)
def update_customer(
    customer_id: str,
    body: CustomerDetailsRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    repo = CustomerRepository(db)
    try:
        details = to_customer_details(body)
        repo.fetch_customer_with_bookings(customer_id)
        if repo.id_number_exists(details.id_number, exclude_customer_id=customer_id):
            raise DuplicateRecordError("This ID Number is already registered.")
        customer = repo.update_customer(customer_id, details)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return detail_response(customer)
