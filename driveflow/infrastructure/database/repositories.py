"""Data access layer - typed mapping between store rows and domain entities"""

from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from driveflow.domain.exceptions import InvalidRecordError, RecordNotFoundError, StoreFetchError
from driveflow.domain.models import (
    Booking,
    BookingStatus,
    Customer,
    CustomerDetails,
    CustomerStatus,
    FleetUnit,
    JobPosting,
    JobStatus,
    OfferingStatus,
    PaymentStatus,
    SafariOffering,
    ServiceLogEntry,
    SiteSettings,
    Trip,
    UnitStatus,
)
from driveflow.infrastructure.database.models import (
    BookingRecord,
    CustomerRecord,
    FleetUnitRecord,
    JobPostingRecord,
    MaintenanceLogRecord,
    SafariOfferingRecord,
    SystemSettingsRecord,
)
from driveflow.infrastructure.observability.metrics import store_failures_counter


@contextmanager
def store_errors(entity: str) -> Iterator[None]:
    """Surface driver/ORM failures as StoreFetchError"""
    try:
        yield
    except SQLAlchemyError as e:
        store_failures_counter.labels(entity=entity).inc()
        raise StoreFetchError(f"Failed to load {entity}: {e}") from e


# --- Row mappers ---


def map_booking(row: BookingRecord) -> Booking:
    try:
        model = row.unit.model if row.unit is not None else None
        return Booking(
            booking_id=row.id,
            customer_id=row.customer_id,
            unit_id=row.unit_id,
            status=BookingStatus(row.status),
            start_date=row.start_date,
            end_date=row.end_date,
            total_cost_cents=row.total_cost_cents or 0,
            amount_paid_cents=row.amount_paid_cents or 0,
            payment_status=PaymentStatus(row.payment_status),
            created_at=row.created_at,
            mpesa_code=row.mpesa_code,
            customer_name=row.customer.full_name if row.customer is not None else "",
            customer_phone=row.customer.phone if row.customer is not None else "",
            plate_number=row.unit.plate_number if row.unit is not None else "",
            model_name=f"{model.make} {model.model}" if model is not None else "",
        )
    except (ValueError, TypeError) as e:
        raise InvalidRecordError(f"Booking {row.id} is malformed: {e}") from e


def map_customer(row: CustomerRecord, with_bookings: bool = True) -> Customer:
    try:
        return Customer(
            customer_id=row.id,
            full_name=row.full_name,
            phone=row.phone,
            id_number=row.id_number,
            email=row.email or "",
            status=CustomerStatus(row.status),
            base_trust_score=row.trust_score,
            created_at=row.created_at,
            id_image_url=row.id_image_url,
            dl_image_url=row.dl_image_url,
            dl_number=row.dl_number,
            bookings=[map_booking(b) for b in row.bookings] if with_bookings else None,
        )
    except (ValueError, TypeError) as e:
        raise InvalidRecordError(f"Customer {row.id} is malformed: {e}") from e


def map_unit(row: FleetUnitRecord) -> FleetUnit:
    try:
        model = row.model
        return FleetUnit(
            unit_id=row.id,
            plate_number=row.plate_number,
            status=UnitStatus(row.status),
            model_id=row.model_id,
            model_name=f"{model.make} {model.model}" if model is not None else "",
            daily_rate_cents=model.daily_rate_cents if model is not None else 0,
            current_mileage=row.current_mileage or 0,
            last_service_mileage=row.last_service_mileage,
            service_interval_km=row.service_interval_km,
            next_service_date=row.next_service_date,
        )
    except (ValueError, TypeError) as e:
        raise InvalidRecordError(f"Fleet unit {row.id} is malformed: {e}") from e


def map_service_log(row: MaintenanceLogRecord) -> ServiceLogEntry:
    return ServiceLogEntry(
        log_id=row.id,
        unit_id=row.unit_id,
        service_date=row.service_date,
        service_type=row.service_type,
        mileage_at_service=row.mileage_at_service,
        cost_cents=row.cost_cents or 0,
        notes=row.notes or "",
    )


def map_job(row: JobPostingRecord) -> JobPosting:
    try:
        return JobPosting(
            job_id=row.id,
            title=row.title,
            department=row.department,
            location=row.location,
            type=row.type,
            salary_range=row.salary_range or "",
            description=row.description or "",
            requirements=list(row.requirements or []),
            status=JobStatus(row.status),
            applicants_count=row.applicants_count or 0,
        )
    except (ValueError, TypeError) as e:
        raise InvalidRecordError(f"Job {row.id} is malformed: {e}") from e


def map_offering(row: SafariOfferingRecord) -> SafariOffering:
    try:
        return SafariOffering(
            offering_id=row.id,
            title=row.title,
            description=row.description or "",
            image_url=row.image_url or "",
            duration_days=row.duration_days,
            price_cents=row.price_cents or 0,
            price_model=row.price_model,
            destinations=list(row.destinations or []),
            inclusions=list(row.inclusions or []),
            status=OfferingStatus(row.status),
        )
    except (ValueError, TypeError) as e:
        raise InvalidRecordError(f"Safari offering {row.id} is malformed: {e}") from e


# --- Repositories ---


class BookingRepository:
    """Repository for bookings and the fleet units they hold"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(BookingRecord).options(
            joinedload(BookingRecord.customer),
            joinedload(BookingRecord.unit).joinedload(FleetUnitRecord.model),
        )

    def _get_row(self, booking_id: str) -> BookingRecord:
        with store_errors("booking"):
            row = self._query().filter(BookingRecord.id == booking_id).first()
        if row is None:
            raise RecordNotFoundError(f"Booking {booking_id} not found")
        return row

    def fetch_booking(self, booking_id: str) -> Booking:
        return map_booking(self._get_row(booking_id))

    def fetch_trip(self, booking_id: str) -> Trip:
        """Build the extension subject from a booking and its unit's model rate"""
        row = self._get_row(booking_id)
        if row.unit is None or row.unit.model is None:
            raise InvalidRecordError(f"Booking {booking_id} has no priced fleet model")
        model = row.unit.model
        return Trip(
            trip_id=row.id,
            car_name=f"{model.make} {model.model}",
            plate=row.unit.plate_number,
            current_end_date=row.end_date,
            daily_rate_cents=model.daily_rate_cents,
            unit_id=row.unit_id,
        )

    def list_bookings(self, status: Optional[str] = None) -> List[Booking]:
        """Newest first; an optional status equality filter runs in the store"""
        with store_errors("bookings"):
            query = self._query()
            if status and status != "all":
                query = query.filter(BookingRecord.status == status)
            rows = query.order_by(BookingRecord.created_at.desc()).all()
        return [map_booking(r) for r in rows]

    def has_overlap(
        self,
        unit_id: str,
        range_start: date,
        range_end: date,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """True when a live booking on the unit intersects [range_start, range_end]"""
        with store_errors("availability"):
            query = self.db.query(BookingRecord.id).filter(
                BookingRecord.unit_id == unit_id,
                BookingRecord.status != BookingStatus.CANCELLED.value,
                BookingRecord.start_date <= range_end,
                BookingRecord.end_date >= range_start,
            )
            if exclude_booking_id:
                query = query.filter(BookingRecord.id != exclude_booking_id)
            return query.first() is not None

    def update_status(self, booking_id: str, status: BookingStatus, unit_status: UnitStatus) -> Booking:
        """Change booking status and keep the fleet unit in sync"""
        row = self._get_row(booking_id)
        row.status = status.value
        if row.unit is not None:
            row.unit.status = unit_status.value
        self.db.flush()
        return map_booking(row)

    def record_payment(
        self,
        booking_id: str,
        amount_paid_cents: int,
        payment_status: PaymentStatus,
        mpesa_code: Optional[str] = None,
    ) -> Booking:
        row = self._get_row(booking_id)
        row.amount_paid_cents = amount_paid_cents
        row.payment_status = payment_status.value
        if mpesa_code:
            row.mpesa_code = mpesa_code
        self.db.flush()
        return map_booking(row)

    def apply_extension(
        self,
        booking_id: str,
        new_end_date: date,
        charged_cents: int,
        payment_status: PaymentStatus,
        reference: Optional[str] = None,
    ) -> Booking:
        """Persist a paid extension: new return date plus the charged difference"""
        row = self._get_row(booking_id)
        row.end_date = new_end_date
        row.total_cost_cents = (row.total_cost_cents or 0) + charged_cents
        row.amount_paid_cents = (row.amount_paid_cents or 0) + charged_cents
        row.payment_status = payment_status.value
        if reference:
            row.mpesa_code = reference
        self.db.flush()
        return map_booking(row)

    def create_booking(
        self,
        customer_id: str,
        unit_id: str,
        start_date: date,
        end_date: date,
        total_cost_cents: int,
        amount_paid_cents: int,
        payment_status: PaymentStatus,
        mpesa_code: Optional[str] = None,
    ) -> Booking:
        """Insert a pending booking; the unit is held once the booking goes active"""
        row = BookingRecord(
            customer_id=customer_id,
            unit_id=unit_id,
            status=BookingStatus.PENDING.value,
            start_date=start_date,
            end_date=end_date,
            total_cost_cents=total_cost_cents,
            amount_paid_cents=amount_paid_cents,
            payment_status=payment_status.value,
            mpesa_code=mpesa_code or None,
        )
        with store_errors("booking"):
            self.db.add(row)
            self.db.flush()
        return self.fetch_booking(row.id)


class FleetRepository:
    """Repository for fleet units and their maintenance history"""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, unit_id: str) -> FleetUnitRecord:
        with store_errors("fleet_unit"):
            row = (
                self.db.query(FleetUnitRecord)
                .options(joinedload(FleetUnitRecord.model))
                .filter(FleetUnitRecord.id == unit_id)
                .first()
            )
        if row is None:
            raise RecordNotFoundError(f"Fleet unit {unit_id} not found")
        return row

    def fetch_unit(self, unit_id: str) -> FleetUnit:
        return map_unit(self._get_row(unit_id))

    def list_units(self) -> List[FleetUnit]:
        with store_errors("fleet_units"):
            rows = (
                self.db.query(FleetUnitRecord)
                .options(joinedload(FleetUnitRecord.model))
                .order_by(FleetUnitRecord.plate_number)
                .all()
            )
        return [map_unit(r) for r in rows]

    def unit_bookings(self, unit_id: str) -> List[Booking]:
        with store_errors("bookings"):
            rows = (
                self.db.query(BookingRecord)
                .options(
                    joinedload(BookingRecord.customer),
                    joinedload(BookingRecord.unit).joinedload(FleetUnitRecord.model),
                )
                .filter(BookingRecord.unit_id == unit_id)
                .order_by(BookingRecord.start_date.desc())
                .all()
            )
        return [map_booking(r) for r in rows]

    def list_service_logs(self, unit_id: str) -> List[ServiceLogEntry]:
        """Most recent service first"""
        with store_errors("maintenance_logs"):
            rows = (
                self.db.query(MaintenanceLogRecord)
                .filter(MaintenanceLogRecord.unit_id == unit_id)
                .order_by(MaintenanceLogRecord.service_date.desc(), MaintenanceLogRecord.created_at.desc())
                .all()
            )
        return [map_service_log(r) for r in rows]

    def add_service_log(self, entry: ServiceLogEntry, unit: FleetUnit) -> ServiceLogEntry:
        """Store a service visit and the unit's reset maintenance schedule together"""
        row = MaintenanceLogRecord(
            unit_id=entry.unit_id,
            service_date=entry.service_date,
            service_type=entry.service_type,
            mileage_at_service=entry.mileage_at_service,
            cost_cents=entry.cost_cents,
            notes=entry.notes or None,
        )
        unit_row = self._get_row(entry.unit_id)
        with store_errors("maintenance_logs"):
            self.db.add(row)
            unit_row.current_mileage = unit.current_mileage
            unit_row.last_service_mileage = unit.last_service_mileage
            unit_row.service_interval_km = unit.service_interval_km
            unit_row.next_service_date = unit.next_service_date
            self.db.flush()
        return map_service_log(row)


class CustomerRepository:
    """Repository for customers with their booking history"""

    def __init__(self, db: Session):
        self.db = db

    def _query(self):
        return self.db.query(CustomerRecord).options(
            selectinload(CustomerRecord.bookings).joinedload(BookingRecord.unit).joinedload(FleetUnitRecord.model),
        )

    def _get_row(self, customer_id: str) -> CustomerRecord:
        with store_errors("customer"):
            row = self._query().filter(CustomerRecord.id == customer_id).first()
        if row is None:
            raise RecordNotFoundError(f"Customer {customer_id} not found")
        return row

    def fetch_customer_with_bookings(self, customer_id: str) -> Customer:
        return map_customer(self._get_row(customer_id))

    def list_customers(self) -> List[Customer]:
        with store_errors("customers"):
            rows = self._query().order_by(CustomerRecord.created_at.desc()).all()
        return [map_customer(r) for r in rows]

    def set_status(self, customer_id: str, status: CustomerStatus) -> Customer:
        row = self._get_row(customer_id)
        row.status = status.value
        self.db.flush()
        return map_customer(row)

    def id_number_exists(self, id_number: str, exclude_customer_id: Optional[str] = None) -> bool:
        with store_errors("customers"):
            query = self.db.query(CustomerRecord.id).filter(CustomerRecord.id_number == id_number)
            if exclude_customer_id:
                query = query.filter(CustomerRecord.id != exclude_customer_id)
            return query.first() is not None

    def create_customer(self, details: CustomerDetails, trust_score: int) -> Customer:
        row = CustomerRecord(
            full_name=details.full_name,
            phone=details.phone,
            email=details.email or None,
            id_number=details.id_number,
            dl_number=details.dl_number,
            id_image_url=details.id_image_url,
            dl_image_url=details.dl_image_url,
            status=CustomerStatus.ACTIVE.value,
            trust_score=trust_score,
        )
        with store_errors("customer"):
            self.db.add(row)
            self.db.flush()
        return self.fetch_customer_with_bookings(row.id)

    def update_customer(self, customer_id: str, details: CustomerDetails) -> Customer:
        """Overwrite contact and KYC fields; a missing document URL keeps the stored one"""
        row = self._get_row(customer_id)
        row.full_name = details.full_name
        row.phone = details.phone
        row.email = details.email or None
        row.id_number = details.id_number
        row.dl_number = details.dl_number
        if details.id_image_url:
            row.id_image_url = details.id_image_url
        if details.dl_image_url:
            row.dl_image_url = details.dl_image_url
        with store_errors("customer"):
            self.db.flush()
        return map_customer(row)


class JobRepository:
    """Repository for career postings"""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, job_id: str) -> JobPostingRecord:
        with store_errors("job"):
            row = self.db.query(JobPostingRecord).filter(JobPostingRecord.id == job_id).first()
        if row is None:
            raise RecordNotFoundError(f"Job {job_id} not found")
        return row

    def list_jobs(self) -> List[JobPosting]:
        with store_errors("careers"):
            rows = self.db.query(JobPostingRecord).order_by(JobPostingRecord.created_at.desc()).all()
        return [map_job(r) for r in rows]

    def set_status(self, job_id: str, status: JobStatus) -> JobPosting:
        row = self._get_row(job_id)
        row.status = status.value
        self.db.flush()
        return map_job(row)

    def fetch_job(self, job_id: str) -> JobPosting:
        return map_job(self._get_row(job_id))

    def _write(self, row: JobPostingRecord, job: JobPosting) -> None:
        row.title = job.title
        row.department = job.department
        row.location = job.location
        row.type = job.type
        row.salary_range = job.salary_range or None
        row.description = job.description
        row.requirements = list(job.requirements)
        row.status = job.status.value

    def create_job(self, job: JobPosting) -> JobPosting:
        row = JobPostingRecord(applicants_count=0)
        self._write(row, job)
        with store_errors("job"):
            self.db.add(row)
            self.db.flush()
        return map_job(row)

    def update_job(self, job_id: str, job: JobPosting) -> JobPosting:
        """Replace the editable fields; applicant count is left alone"""
        row = self._get_row(job_id)
        self._write(row, job)
        with store_errors("job"):
            self.db.flush()
        return map_job(row)

    def delete(self, job_id: str) -> None:
        self.db.delete(self._get_row(job_id))
        self.db.flush()


class SafariRepository:
    """Repository for safari packages"""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self, offering_id: str) -> SafariOfferingRecord:
        with store_errors("safari_offering"):
            row = self.db.query(SafariOfferingRecord).filter(SafariOfferingRecord.id == offering_id).first()
        if row is None:
            raise RecordNotFoundError(f"Safari offering {offering_id} not found")
        return row

    def list_offerings(self, status: Optional[str] = None) -> List[SafariOffering]:
        with store_errors("safari_offerings"):
            query = self.db.query(SafariOfferingRecord)
            if status and status != "all":
                query = query.filter(SafariOfferingRecord.status == status)
            rows = query.order_by(SafariOfferingRecord.created_at.desc()).all()
        return [map_offering(r) for r in rows]

    def fetch_offering(self, offering_id: str) -> SafariOffering:
        return map_offering(self._get_row(offering_id))

    def _write(self, row: SafariOfferingRecord, offering: SafariOffering) -> None:
        row.title = offering.title
        row.description = offering.description
        row.image_url = offering.image_url or None
        row.duration_days = offering.duration_days
        row.price_cents = offering.price_cents
        row.price_model = offering.price_model
        row.destinations = list(offering.destinations)
        row.inclusions = list(offering.inclusions)
        row.status = offering.status.value

    def create_offering(self, offering: SafariOffering) -> SafariOffering:
        row = SafariOfferingRecord()
        self._write(row, offering)
        with store_errors("safari_offering"):
            self.db.add(row)
            self.db.flush()
        return map_offering(row)

    def update_offering(self, offering_id: str, offering: SafariOffering) -> SafariOffering:
        row = self._get_row(offering_id)
        self._write(row, offering)
        with store_errors("safari_offering"):
            self.db.flush()
        return map_offering(row)

    def delete(self, offering_id: str) -> None:
        self.db.delete(self._get_row(offering_id))
        self.db.flush()


class SettingsRepository:
    """Repository for the single site settings row"""

    def __init__(self, db: Session):
        self.db = db

    def _get_row(self) -> Optional[SystemSettingsRecord]:
        with store_errors("system_settings"):
            return self.db.query(SystemSettingsRecord).order_by(SystemSettingsRecord.id).first()

    def get_settings(self) -> SiteSettings:
        """Stored settings, or defaults when the row has not been seeded"""
        row = self._get_row()
        if row is None:
            return SiteSettings()
        return SiteSettings(
            site_name=row.site_name,
            currency=row.currency,
            support_email=row.support_email,
            vat_enabled=row.vat_enabled,
        )

    def save_settings(self, site_settings: SiteSettings) -> SiteSettings:
        row = self._get_row()
        if row is None:
            row = SystemSettingsRecord(id=1)
            self.db.add(row)
        row.site_name = site_settings.site_name
        row.currency = site_settings.currency
        row.support_email = site_settings.support_email
        row.vat_enabled = site_settings.vat_enabled
        self.db.flush()
        return site_settings
