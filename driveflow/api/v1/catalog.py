"""Admin careers and safari package endpoints - list, create, edit, publish and delete"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from driveflow.api.v1.schemas import (
    JobListResponse,
    JobRequest,
    JobSchema,
    OfferingListResponse,
    OfferingRequest,
    OfferingSchema,
)
from driveflow.api.dependencies import CurrentUser, get_request_id, require_admin
from driveflow.api.errors import raise_http_error
from driveflow.infrastructure.database.session import get_db
from driveflow.infrastructure.database.repositories import JobRepository, SafariRepository
from driveflow.domain.catalog import prepare_job, prepare_offering
from driveflow.domain.exceptions import DomainException
from driveflow.domain.filtering import filter_jobs, filter_offerings
from driveflow.domain.models import JobPosting, JobStatus, SafariOffering

router = APIRouter()


@router.get("/careers", response_model=JobListResponse)
def list_jobs(
    request: Request,
    q: Optional[str] = Query(None, description="Search title or department"),
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        jobs = JobRepository(db).list_jobs()
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return JobListResponse(jobs=[JobSchema.model_validate(j) for j in filter_jobs(jobs, q)])


@router.post("/careers", response_model=JobSchema, status_code=201)
def create_job(
    body: JobRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        job = prepare_job(JobPosting(job_id="", **body.model_dump()))
        job = JobRepository(db).create_job(job)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return JobSchema.model_validate(job)


@router.put("/careers/{job_id}", response_model=JobSchema)
def update_job(
    job_id: str,
    body: JobRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        job = prepare_job(JobPosting(job_id=job_id, **body.model_dump()))
        job = JobRepository(db).update_job(job_id, job)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return JobSchema.model_validate(job)


@router.post("/careers/{job_id}/toggle-status", response_model=JobSchema)
def toggle_job_status(
    job_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Publish a closed/draft job or close an active one"""
    repo = JobRepository(db)
    try:
        job = repo.fetch_job(job_id)
        new_status = JobStatus.CLOSED if job.status == JobStatus.ACTIVE else JobStatus.ACTIVE
        job = repo.set_status(job_id, new_status)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return JobSchema.model_validate(job)


@router.delete("/careers/{job_id}", status_code=204)
def delete_job(
    job_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        JobRepository(db).delete(job_id)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return Response(status_code=204)


@router.get("/safari", response_model=OfferingListResponse)
def list_offerings(
    request: Request,
    q: Optional[str] = Query(None, description="Search title or destination"),
    status: Optional[str] = Query(None, pattern="^(all|active|draft|archived)$"),
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        offerings = SafariRepository(db).list_offerings(status)
    except DomainException as e:
        raise_http_error(e, get_request_id(request))
    return OfferingListResponse(offerings=[OfferingSchema.model_validate(o) for o in filter_offerings(offerings, q)])


@router.post("/safari", response_model=OfferingSchema, status_code=201)
def create_offering(
    body: OfferingRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        offering = prepare_offering(SafariOffering(offering_id="", **body.model_dump()))
        offering = SafariRepository(db).create_offering(offering)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return OfferingSchema.model_validate(offering)


@router.put("/safari/{offering_id}", response_model=OfferingSchema)
def update_offering(
    offering_id: str,
    body: OfferingRequest,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    """Replace a package's details; the edit form always sends the whole package"""
    try:
        offering = prepare_offering(SafariOffering(offering_id=offering_id, **body.model_dump()))
        offering = SafariRepository(db).update_offering(offering_id, offering)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return OfferingSchema.model_validate(offering)


@router.delete("/safari/{offering_id}", status_code=204)
def delete_offering(
    offering_id: str,
    request: Request,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
):
    try:
        SafariRepository(db).delete(offering_id)
        db.commit()
    except DomainException as e:
        raise_http_error(e, get_request_id(request), db)
    return Response(status_code=204)
