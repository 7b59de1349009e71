"""Job router - FastAPI endpoints for jobs"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..invoices.schemas import GenerateInvoiceRequest, InvoiceResponse
from ..invoices.service import InvoiceService
from .schemas import (
    JobCancelRequest,
    JobCompleteRequest,
    JobCreate,
    JobEventResponse,
    JobResponse,
    JobStartRequest,
    JobUpdate,
)
from .service import JobService

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def get_job_service(db: Session = Depends(get_db)) -> JobService:
    """Dependency injection for JobService"""
    return JobService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[JobResponse])
async def get_jobs(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    customerId: Optional[int] = Query(None),
    assignedTo: Optional[int] = Query(None),
    filter: Optional[str] = Query(None, description="today | upcoming"),
    startDate: Optional[str] = Query(None),
    endDate: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    sort: Optional[str] = Query(None, description="updatedAt | scheduledFor"),
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    jobs = service.get_jobs(
        current_user, search, status, customerId, assignedTo, filter, startDate, endDate, limit, sort
    )
    return [JobResponse.from_model(j) for j in jobs]


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    data: JobCreate,
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    job = await service.create_job(data, current_user)
    return JobResponse.from_model(job, include_details=True)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: int,
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    return JobResponse.from_model(service.get_job(job_id, current_user), include_details=True)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: int,
    data: JobUpdate,
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    job = await service.update_job(job_id, data, current_user)
    return JobResponse.from_model(job, include_details=True)


@router.delete("/{job_id}")
async def delete_job(
    job_id: int,
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    return service.delete_job(job_id, current_user)


# ============================================================================
# LIFECYCLE
# ============================================================================


@router.post("/{job_id}/start", response_model=JobResponse)
async def start_job(
    job_id: int,
    data: Optional[JobStartRequest] = None,
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    job = service.start_job(job_id, data or JobStartRequest(), current_user)
    return JobResponse.from_model(job, include_details=True)


@router.post("/{job_id}/complete", response_model=JobResponse)
async def complete_job(
    job_id: int,
    data: Optional[JobCompleteRequest] = None,
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    job = await service.complete_job(job_id, data or JobCompleteRequest(), current_user)
    return JobResponse.from_model(job, include_details=True)


@router.post("/{job_id}/cancel", response_model=JobResponse)
async def cancel_job(
    job_id: int,
    data: JobCancelRequest,
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    job = await service.cancel_job(job_id, data, current_user)
    return JobResponse.from_model(job, include_details=True)


@router.post("/{job_id}/generate-invoice", response_model=InvoiceResponse, status_code=status.HTTP_201_CREATED)
async def generate_invoice(
    job_id: int,
    data: Optional[GenerateInvoiceRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = data or GenerateInvoiceRequest()
    invoice = InvoiceService(db).generate_for_job(
        job_id,
        current_user,
        tax_rate=data.taxRate,
        discount_amount=data.discountAmount,
        notes=data.notes,
        terms=data.terms,
        footer=data.footer,
        due_in_days=data.dueInDays,
    )
    return InvoiceResponse.from_model(invoice, include_details=True)


@router.get("/{job_id}/timeline", response_model=list[JobEventResponse])
async def get_job_timeline(
    job_id: int,
    current_user: User = Depends(get_current_user),
    service: JobService = Depends(get_job_service),
):
    return [JobEventResponse.from_model(e) for e in service.get_timeline(job_id, current_user)]
