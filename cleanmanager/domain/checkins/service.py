"""Check-in service - GPS check-in / check-out and automatic completion"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import CHECKOUT_INVOICE_DUE_DAYS, MAX_CHECK_IN_DISTANCE_METERS
from ...email_service import send_check_in_notification_email
from ...models import Employee, Job, JobCheckIn, User
from ...models_invoice import Invoice
from ...security_utils import sanitize_text
from ...utils.dates import format_display_date, format_display_datetime, utc_now
from ...utils.geo import haversine_distance, is_valid_location
from ..company.service import office_recipients
from ..employee_portal.repository import EmployeePortalRepository
from ..event_log.service import log_event
from ..invoices.service import InvoiceGenerationError, email_invoice, generate_invoice_from_job
from ..jobs.lifecycle import build_full_address, mark_job_completed
from ..jobs.repository import JobRepository
from .repository import CheckInRepository
from .schemas import CheckInRequest

logger = logging.getLogger(__name__)

CHECK_TYPES = ("check_in", "check_out")
LOCATION_UNAVAILABLE = "Location unavailable"
MAX_COMMENT_LENGTH = 1000


def evaluate_location(
    latitude: Optional[float],
    longitude: Optional[float],
    job_latitude: Optional[float],
    job_longitude: Optional[float],
    max_distance: float = MAX_CHECK_IN_DISTANCE_METERS,
) -> tuple[Optional[float], bool]:
    """
    Distance from the job site in metres and whether it is within range.

    A job without coordinates accepts any valid location. Without a valid
    location there is no distance and the check is out of range.
    """
    if not is_valid_location(latitude, longitude):
        return None, False
    if job_latitude is None or job_longitude is None:
        return 0.0, True
    distance = haversine_distance(latitude, longitude, job_latitude, job_longitude)
    return round(distance, 2), distance <= max_distance


def summarize_check_ins(check_ins: list[JobCheckIn], now: Optional[datetime] = None) -> dict:
    """Current state and minutes on site for one employee's records on a job (oldest first)"""
    now = now or utc_now()
    last_in = next((c for c in reversed(check_ins) if c.type == "check_in"), None)
    last_out = next((c for c in reversed(check_ins) if c.type == "check_out"), None)

    if last_in and (not last_out or last_in.checked_at > last_out.checked_at):
        status = "checked_in"
    elif last_out:
        status = "checked_out"
    else:
        status = "not_checked_in"

    total_seconds = 0.0
    open_since = None
    for record in check_ins:
        if record.type == "check_in":
            open_since = record.checked_at
        elif record.type == "check_out" and open_since is not None:
            total_seconds += (record.checked_at - open_since).total_seconds()
            open_since = None
    if status == "checked_in" and open_since is not None:
        total_seconds += (now - open_since).total_seconds()

    job_duration = None
    if last_in and last_out and last_out.checked_at >= last_in.checked_at:
        job_duration = int((last_out.checked_at - last_in.checked_at).total_seconds() // 60)

    return {
        "status": status,
        "lastCheckIn": last_in,
        "lastCheckOut": last_out,
        "totalTimeOnSite": max(0, int(total_seconds // 60)),
        "hasCheckedIn": last_in is not None,
        "hasCheckedOut": last_out is not None,
        "jobDuration": job_duration,
    }


class CheckInService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CheckInRepository()

    def _get_assigned_job(self, job_id: int, employee: Employee):
        assignment = EmployeePortalRepository.get_assignment(self.db, job_id, employee.id, employee.company_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Job not found or not assigned to you")
        job = EmployeePortalRepository.get_job(self.db, job_id, employee.company_id)
        return assignment, job

    def get_status(self, job_id: int, employee: Employee) -> tuple[dict, list[JobCheckIn]]:
        self._get_assigned_job(job_id, employee)
        check_ins = self.repo.get_for_job_employee(self.db, job_id, employee.id)
        return summarize_check_ins(check_ins), check_ins

    def get_check_ins(
        self, user: User, job_id: Optional[int] = None, employee_id: Optional[int] = None
    ) -> list[JobCheckIn]:
        return self.repo.get_check_ins(self.db, user.company_id, job_id, employee_id)

    async def record(
        self, job_id: int, data: CheckInRequest, employee: Employee, user_agent: Optional[str] = None
    ) -> tuple[JobCheckIn, Job, bool, Optional[Invoice]]:
        """
        Record a check-in or check-out.

        Returns the record, the job, whether the job was completed by this
        check-out, and the invoice generated on completion (if any).
        """
        assignment, job = self._get_assigned_job(job_id, employee)
        check_type = data.type
        if check_type not in CHECK_TYPES:
            raise HTTPException(status_code=400, detail="Invalid check-in type")

        existing_in = self.repo.find(self.db, job_id, employee.id, "check_in")
        if check_type == "check_in" and existing_in:
            raise HTTPException(status_code=400, detail="You have already checked in to this job")
        if check_type == "check_out":
            if not existing_in:
                raise HTTPException(status_code=400, detail="You must check in before checking out")
            if self.repo.find(self.db, job_id, employee.id, "check_out"):
                raise HTTPException(status_code=400, detail="You have already checked out of this job")

        distance, within_range = evaluate_location(data.latitude, data.longitude, job.latitude, job.longitude)
        has_location = is_valid_location(data.latitude, data.longitude)
        captured_address = sanitize_text(data.address, 500) or (
            build_full_address(job) or None if has_location else LOCATION_UNAVAILABLE
        )
        comment = sanitize_text(data.comment, MAX_COMMENT_LENGTH) if check_type == "check_out" else None

        now = utc_now()
        job_completed = False
        invoice = None
        try:
            check_in = self.repo.add(
                self.db,
                JobCheckIn(
                    company_id=employee.company_id,
                    job_id=job.id,
                    employee_id=employee.id,
                    type=check_type,
                    latitude=data.latitude if has_location else None,
                    longitude=data.longitude if has_location else None,
                    location_accuracy=data.accuracy,
                    captured_address=captured_address,
                    distance_from_job_site=distance,
                    is_within_range=within_range,
                    device_type=sanitize_text(data.deviceType, 50),
                    device_model=sanitize_text(data.deviceModel, 100),
                    user_agent=(user_agent or "")[:500] or None,
                    checked_at=now,
                ),
            )

            if check_type == "check_in":
                if job.status == "scheduled":
                    job.status = "in-progress"
                JobRepository.add_job_event(
                    self.db,
                    job.id,
                    "check_in",
                    f"{employee.full_name} checked in",
                    meta={"employeeId": employee.id, "withinRange": within_range, "distance": distance},
                )
            else:
                assignment.status = "completed"
                assignment.completed_at = now
                JobRepository.add_job_event(
                    self.db,
                    job.id,
                    "check_out",
                    f"{employee.full_name} checked out",
                    meta={"employeeId": employee.id, "withinRange": within_range, "distance": distance},
                )
                if comment:
                    JobRepository.add_job_event(
                        self.db,
                        job.id,
                        "check_out_comment",
                        "Cleaner left a check-out comment.",
                        meta={"comment": comment, "employeeId": employee.id},
                    )

                active = [a for a in job.assignments if a.status != "declined"]
                if job.status != "completed" and active and all(a.status == "completed" for a in active):
                    mark_job_completed(self.db, job, now=now)
                    job_completed = True
                    JobRepository.add_job_event(
                        self.db, job.id, "job_completed", "All assigned cleaners checked out"
                    )
                    invoice = self._create_completion_invoice(job, now)

            log_event(
                self.db,
                employee.company_id,
                check_type,
                entity_type="job",
                entity_id=job.id,
                employee_id=employee.id,
                meta={"withinRange": within_range, "distance": distance},
            )
            self.db.commit()
            self.db.refresh(check_in)
        except HTTPException:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record {check_type} for job {job_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to record check-in")

        logger.info(
            f"✅ Employee {employee.id} {check_type} on job {job.id} "
            f"(distance: {distance}, within range: {within_range})"
        )

        await self._notify(job, employee, check_in)
        if invoice and job.customer and job.customer.email:
            await email_invoice(invoice, job.customer, employee.company)
        return check_in, job, job_completed, invoice

    def _create_completion_invoice(self, job: Job, now: datetime) -> Optional[Invoice]:
        try:
            return generate_invoice_from_job(
                self.db,
                job,
                status="sent",
                due_in_days=CHECKOUT_INVOICE_DUE_DAYS,
                price=job.actual_price,
                numbered_on=now,
                notes=f"Service completed on {format_display_date(now)}",
            )
        except InvoiceGenerationError as e:
            logger.warning(f"⚠️ No invoice generated for job {job.id}: {e}")
            return None

    async def _notify(self, job: Job, employee: Employee, check_in: JobCheckIn) -> None:
        company = employee.company
        recipients = [
            (admin.email, admin.first_name) for admin in office_recipients(self.db, company, "employeeUpdates")
        ]
        if job.customer and job.customer.email:
            recipients.append((job.customer.email, job.customer.first_name))

        for email, name in recipients:
            try:
                await send_check_in_notification_email(
                    to=email,
                    recipient_name=name,
                    company_name=company.name,
                    employee_name=employee.full_name,
                    job_title=job.title,
                    check_type=check_in.type,
                    checked_at=format_display_datetime(check_in.checked_at),
                    address=check_in.captured_address,
                    within_range=check_in.is_within_range,
                )
            except Exception as e:
                logger.error(f"❌ Failed to send {check_in.type} notification to {email}: {e}")
