"""SQLAlchemy ORM models for the hosted booking store"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, DateTime, Date, Integer, ForeignKey, Text, JSON
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


class CustomerRecord(Base):
    """Registered renter with KYC documents"""

    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=new_id)
    full_name = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    email = Column(Text, nullable=True)
    id_number = Column(Text, nullable=False)
    dl_number = Column(Text, nullable=True)
    status = Column(Text, nullable=False, default="active")
    trust_score = Column(Integer, nullable=True)
    id_image_url = Column(Text, nullable=True)
    dl_image_url = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    bookings = relationship("BookingRecord", back_populates="customer")


class FleetModelRecord(Base):
    """Make/model/year template shared by units"""

    __tablename__ = "fleet_models"

    id = Column(String(36), primary_key=True, default=new_id)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    year = Column(Integer, nullable=True)
    daily_rate_cents = Column(BigInteger, nullable=False)
    image_url = Column(Text, nullable=True)

    units = relationship("FleetUnitRecord", back_populates="model")


class FleetUnitRecord(Base):
    """Physical vehicle in the fleet"""

    __tablename__ = "fleet_units"

    id = Column(String(36), primary_key=True, default=new_id)
    model_id = Column(String(36), ForeignKey("fleet_models.id"), nullable=True)
    plate_number = Column(Text, nullable=False, unique=True)
    status = Column(Text, nullable=False, default="available")
    current_mileage = Column(Integer, nullable=False, default=0)
    last_service_mileage = Column(Integer, nullable=True)
    service_interval_km = Column(Integer, nullable=True)
    next_service_date = Column(Date, nullable=True)

    model = relationship("FleetModelRecord", back_populates="units")
    bookings = relationship("BookingRecord", back_populates="unit")
    service_logs = relationship("MaintenanceLogRecord", back_populates="unit")


class MaintenanceLogRecord(Base):
    """Service visit recorded against a unit"""

    __tablename__ = "maintenance_logs"

    id = Column(String(36), primary_key=True, default=new_id)
    unit_id = Column(String(36), ForeignKey("fleet_units.id"), nullable=False, index=True)
    service_date = Column(Date, nullable=False)
    service_type = Column(Text, nullable=False)
    mileage_at_service = Column(Integer, nullable=False)
    cost_cents = Column(BigInteger, nullable=False, default=0)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    unit = relationship("FleetUnitRecord", back_populates="service_logs")


class BookingRecord(Base):
    """Reservation of a unit by a customer"""

    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)
    unit_id = Column(String(36), ForeignKey("fleet_units.id"), nullable=False, index=True)
    status = Column(Text, nullable=False, default="pending")
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    total_cost_cents = Column(BigInteger, nullable=False, default=0)
    amount_paid_cents = Column(BigInteger, nullable=False, default=0)
    payment_status = Column(Text, nullable=False, default="unpaid")
    mpesa_code = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    customer = relationship("CustomerRecord", back_populates="bookings")
    unit = relationship("FleetUnitRecord", back_populates="bookings")


class JobPostingRecord(Base):
    __tablename__ = "careers"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(Text, nullable=False)
    department = Column(Text, nullable=False)
    location = Column(Text, nullable=False, default="Nairobi, Kenya")
    type = Column(Text, nullable=False, default="Full-time")
    salary_range = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    requirements = Column(JSON, nullable=True)
    status = Column(Text, nullable=False, default="draft")
    applicants_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SafariOfferingRecord(Base):
    __tablename__ = "safari_offerings"

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)
    duration_days = Column(Integer, nullable=False, default=3)
    price_cents = Column(BigInteger, nullable=False, default=0)
    price_model = Column(Text, nullable=False, default="per_person")
    destinations = Column(JSON, nullable=True)
    inclusions = Column(JSON, nullable=True)
    status = Column(Text, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class SystemSettingsRecord(Base):
    """Single configuration row edited from the admin settings page"""

    __tablename__ = "system_settings"

    id = Column(Integer, primary_key=True)
    site_name = Column(Text, nullable=False, default="Driveflow")
    currency = Column(Text, nullable=False, default="KES")
    support_email = Column(Text, nullable=False, default="help@driveflow.co.ke")
    vat_enabled = Column(Boolean, nullable=False, default=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=func.now())
