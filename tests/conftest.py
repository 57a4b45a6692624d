"""Pytest fixtures for testing"""

import pytest
from datetime import date, datetime, timezone
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlalchemy.orm import sessionmaker, Session
from driveflow.api.main import create_app
from driveflow.api.dependencies import get_payment_processor
from driveflow.infrastructure.clients.payment import SimulatedPaymentProcessor
from driveflow.infrastructure.database.models import (
    Base,
    BookingRecord,
    CustomerRecord,
    FleetModelRecord,
    FleetUnitRecord,
)
from driveflow.infrastructure.database.session import get_db
from driveflow.domain.models import Booking, BookingStatus, Customer, PaymentStatus, Trip


# Test database: one in-memory connection shared by the app and the tests
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False}, poolclass=StaticPool)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
USER_HEADERS = {"X-User-Id": "user-1", "X-User-Role": "user"}


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and instant payments"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_processor] = lambda: SimulatedPaymentProcessor(delay_seconds=0)
    return TestClient(app)


@pytest.fixture
def admin_headers() -> dict:
    return dict(ADMIN_HEADERS)


@pytest.fixture
def user_headers() -> dict:
    return dict(USER_HEADERS)


@pytest.fixture
def fleet_unit(db: Session) -> FleetUnitRecord:
    """A rented Land Cruiser priced at KES 5,000/day"""
    model = FleetModelRecord(make="Toyota", model="Land Cruiser", year=2022, daily_rate_cents=500_000)
    unit = FleetUnitRecord(plate_number="KDA 123A", status="rented", model=model)
    db.add_all([model, unit])
    db.commit()
    return unit


@pytest.fixture
def customer_record(db: Session) -> CustomerRecord:
    customer = CustomerRecord(
        full_name="John Smith",
        phone="0712345678",
        email="john@example.com",
        id_number="ID12345",
        trust_score=100,
        id_image_url="https://cdn.example.com/kyc/id.jpg",
    )
    db.add(customer)
    db.commit()
    return customer


@pytest.fixture
def make_booking(db: Session, fleet_unit: FleetUnitRecord, customer_record: CustomerRecord) -> Callable[..., BookingRecord]:
    """Factory for stored bookings on the shared unit and customer"""

    def _make(
        start: date = date(2025, 11, 20),
        end: date = date(2025, 11, 28),
        status: str = "active",
        total_cost_cents: int = 4_000_000,
        amount_paid_cents: int = 4_000_000,
        unit: FleetUnitRecord | None = None,
        customer: CustomerRecord | None = None,
    ) -> BookingRecord:
        booking = BookingRecord(
            customer_id=(customer or customer_record).id,
            unit_id=(unit or fleet_unit).id,
            status=status,
            start_date=start,
            end_date=end,
            total_cost_cents=total_cost_cents,
            amount_paid_cents=amount_paid_cents,
            payment_status="paid" if amount_paid_cents >= total_cost_cents else "partial",
        )
        db.add(booking)
        db.commit()
        return booking

    return _make


@pytest.fixture
def trip() -> Trip:
    """Trip ending 2025-11-28 at KES 5,000/day"""
    return Trip(
        trip_id="trip_1",
        car_name="Toyota Land Cruiser",
        plate="KDA 123A",
        current_end_date=date(2025, 11, 28),
        daily_rate_cents=500_000,
        unit_id="unit_1",
    )


def make_domain_booking(
    booking_id: str,
    status: BookingStatus = BookingStatus.COMPLETED,
    total_cost_cents: int = 1_000_000,
    customer_name: str = "John Smith",
    plate_number: str = "KDA 123A",
) -> Booking:
    return Booking(
        booking_id=booking_id,
        customer_id="cust_1",
        unit_id="unit_1",
        status=status,
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 3),
        total_cost_cents=total_cost_cents,
        amount_paid_cents=total_cost_cents,
        payment_status=PaymentStatus.PAID,
        customer_name=customer_name,
        plate_number=plate_number,
    )


@pytest.fixture
def booking_factory() -> Callable[..., Booking]:
    return make_domain_booking


@pytest.fixture
def sample_customer() -> Customer:
    """Customer with three good trips and one cancellation"""
    return Customer(
        customer_id="cust_1",
        full_name="John Smith",
        phone="0712345678",
        id_number="ID12345",
        email="john@example.com",
        base_trust_score=100,
        created_at=datetime(2025, 3, 14, 9, 30, tzinfo=timezone.utc),
        id_image_url="https://cdn.example.com/kyc/id.jpg",
        dl_image_url="https://cdn.example.com/kyc/dl.jpg",
        bookings=[
            make_domain_booking("b1", BookingStatus.COMPLETED, 1_500_000),
            make_domain_booking("b2", BookingStatus.ACTIVE, 2_000_000),
            make_domain_booking("b3", BookingStatus.PENDING, 500_000),
            make_domain_booking("b4", BookingStatus.CANCELLED, 9_900_000),
        ],
    )
