"""Career posting and safari package editing rules"""

from dataclasses import replace
from typing import Iterable, List

from driveflow.domain.exceptions import RecordValidationError
from driveflow.domain.models import JobPosting, JobStatus, PriceModel, SafariOffering

# the editor saves either straight to the site or as a hidden draft
EDITABLE_JOB_STATUSES = (JobStatus.ACTIVE, JobStatus.DRAFT)


def clean_list(items: Iterable[str]) -> List[str]:
    """Trimmed entries in their original order, blanks dropped"""
    return [item.strip() for item in items if item and item.strip()]


def prepare_job(job: JobPosting) -> JobPosting:
    """
    Normalise and validate a job posting before it is saved.

    Title and description are required; requirement bullets are trimmed.
    """
    errors = {}
    if not job.title.strip():
        errors["title"] = "Title is required"
    if not job.description.strip():
        errors["description"] = "Description is required"
    if job.status not in EDITABLE_JOB_STATUSES:
        errors["status"] = "Save as active or draft; use toggle-status to close a job"
    if errors:
        raise RecordValidationError("Invalid job posting", errors=errors)

    return replace(
        job,
        title=job.title.strip(),
        department=job.department.strip(),
        location=job.location.strip() or "Nairobi, Kenya",
        salary_range=job.salary_range.strip(),
        requirements=clean_list(job.requirements),
    )


def prepare_offering(offering: SafariOffering) -> SafariOffering:
    """Normalise and validate a safari package before it is saved"""
    errors = {}
    if not offering.title.strip():
        errors["title"] = "Title is required"
    if offering.price_cents <= 0:
        errors["price_cents"] = "Price is required"
    if offering.duration_days < 1:
        errors["duration_days"] = "A package lasts at least one day"
    try:
        price_model = PriceModel(offering.price_model).value
    except ValueError:
        errors["price_model"] = f"Unknown price model {offering.price_model!r}"
    if errors:
        raise RecordValidationError("Invalid safari package", errors=errors)

    return replace(
        offering,
        title=offering.title.strip(),
        price_model=price_model,
        destinations=clean_list(offering.destinations),
        inclusions=clean_list(offering.inclusions),
    )
