"""Job service - Business logic for scheduling, assignment and job lifecycle"""

import logging
import math
from datetime import timedelta
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import ADMIN_ROLES
from ...config import CHECKOUT_INVOICE_DUE_DAYS, DEFAULT_CURRENCY
from ...email_service import (
    send_job_assigned_email,
    send_job_cancelled_email,
    send_job_completed_email,
    send_job_unassigned_email,
)
from ...models import Employee, Job, JobAssignment, User
from ...security_utils import sanitize_text
from ...utils.dates import format_display_datetime, parse_datetime, utc_now
from ...utils.sanitization import format_money
from ..employees.repository import EmployeeRepository
from ..event_log.service import log_event
from ..invoices.service import InvoiceGenerationError, generate_invoice_from_job
from .assignments import AssignmentError, diff_assignments, normalize_assignments, parse_duration_minutes, resolve_pay
from .lifecycle import build_full_address, ensure_feedback_token, feedback_url, mark_job_completed
from .repository import JobRepository
from .schemas import JobCancelRequest, JobCompleteRequest, JobCreate, JobStartRequest, JobUpdate

logger = logging.getLogger(__name__)

JOB_STATUSES = ("scheduled", "in-progress", "completed", "cancelled")

# request field -> column, copied as-is when present
UPDATE_FIELDS = {
    "description": "description",
    "jobType": "job_type",
    "location": "location",
    "addressLine2": "address_line2",
    "city": "city",
    "postcode": "postcode",
    "latitude": "latitude",
    "longitude": "longitude",
    "accessInstructions": "access_instructions",
    "parkingInstructions": "parking_instructions",
    "specialInstructions": "special_instructions",
    "recurrence": "recurrence",
    "priority": "priority",
    "estimatedPrice": "estimated_price",
    "actualPrice": "actual_price",
    "currency": "currency",
    "qualityRating": "quality_rating",
    "customerFeedback": "customer_feedback",
    "internalNotes": "internal_notes",
}

FREE_TEXT_COLUMNS = (
    "description",
    "access_instructions",
    "parking_instructions",
    "special_instructions",
    "customer_feedback",
    "internal_notes",
)


def _parse_time(value: Optional[str], label: str):
    try:
        return parse_datetime(value)
    except (ValueError, OverflowError):
        raise HTTPException(status_code=400, detail=f"Invalid {label}")


def _positive_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


class JobService:
    """Service layer for job business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = JobRepository()
        self.employee_repo = EmployeeRepository()

    # ========================================================================
    # QUERIES
    # ========================================================================

    def get_jobs(
        self,
        user: User,
        search: Optional[str] = None,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        assigned_to: Optional[int] = None,
        date_filter: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
    ) -> list[Job]:
        return self.repo.get_jobs(
            self.db,
            user.company_id,
            search=search,
            status=status,
            customer_id=customer_id,
            assigned_to=assigned_to,
            date_filter=date_filter,
            start_date=_parse_time(start_date, "start date"),
            end_date=_parse_time(end_date, "end date"),
            limit=limit,
            sort=sort,
            now=utc_now(),
        )

    def get_job(self, job_id: int, user: User) -> Job:
        job = self.repo.get_job_by_id(self.db, job_id, user.company_id)
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")
        return job

    def get_timeline(self, job_id: int, user: User):
        job = self.get_job(job_id, user)
        return self.repo.get_events(self.db, job.id)

    # ========================================================================
    # CREATE
    # ========================================================================

    def _load_assignees(self, assignments: list[dict], company_id: int) -> dict[int, Employee]:
        employee_ids = [a["employeeId"] for a in assignments]
        employees = self.employee_repo.get_employees_by_ids(self.db, employee_ids, company_id)
        if len(employees) != len(set(employee_ids)):
            raise HTTPException(status_code=404, detail="One or more assigned employees were not found")
        return {e.id: e for e in employees}

    def _resolve_pay(self, assignments, employees_by_id, plan_price, fallback_pay) -> list[dict]:
        try:
            return resolve_pay(assignments, employees_by_id, plan_price, fallback_pay)
        except AssignmentError as e:
            raise HTTPException(status_code=400, detail=str(e))

    async def create_job(self, data: JobCreate, user: User) -> Job:
        logger.info(f"📥 Creating job for company_id: {user.company_id}")
        scheduled_start = _parse_time(data.scheduledFor, "scheduled start time")
        now = utc_now()
        if scheduled_start and not data.allowPast and scheduled_start < now:
            raise HTTPException(status_code=400, detail="Scheduled time cannot be in the past")

        assignments = normalize_assignments(data.assignedEmployees, data.assignedTo, data.employeePay)
        if not data.title or not data.customerId or not data.location or not assignments or not data.planId:
            raise HTTPException(
                status_code=400, detail="Title, customer, plan, location, and assigned staff are required"
            )

        plan = self.repo.get_plan(self.db, data.planId, user.company_id)
        if not plan:
            raise HTTPException(status_code=404, detail="Cleaning plan not found")

        customer = self.repo.get_customer(self.db, data.customerId, user.company_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")

        employees_by_id = self._load_assignees(assignments, user.company_id)
        resolved = self._resolve_pay(assignments, employees_by_id, plan.price, data.employeePay)

        duration = _positive_int(data.durationMinutes) or parse_duration_minutes(plan.estimated_duration)
        scheduled_end = _parse_time(data.scheduledEnd, "scheduled end time") if scheduled_start else None
        if scheduled_start and not scheduled_end:
            scheduled_end = scheduled_start + timedelta(minutes=duration)

        back_complete = data.backCreateComplete
        completed_at = None
        actual_price = None
        if back_complete:
            completed_at = scheduled_end or scheduled_start or now
            actual_price = data.estimatedPrice if data.estimatedPrice is not None else plan.price

        primary = resolved[0]
        try:
            job = Job(
                company_id=user.company_id,
                title=data.title,
                description=sanitize_text(data.description, 5000),
                job_type=data.jobType,
                customer_id=customer.id,
                assigned_to=primary["employee_id"],
                plan_id=plan.id,
                location=data.location,
                address_line2=data.addressLine2,
                city=data.city,
                postcode=data.postcode,
                latitude=data.latitude,
                longitude=data.longitude,
                access_instructions=sanitize_text(data.accessInstructions, 2000),
                parking_instructions=sanitize_text(data.parkingInstructions, 2000),
                special_instructions=sanitize_text(data.specialInstructions, 2000),
                scheduled_for=scheduled_start,
                scheduled_end=scheduled_end,
                duration_minutes=duration,
                recurrence=data.recurrence or "none",
                status="completed" if back_complete else "scheduled",
                priority=data.priority or "normal",
                completed_at=completed_at,
                estimated_price=data.estimatedPrice,
                actual_price=actual_price,
                employee_pay=primary["pay_amount"],
                currency=data.currency or DEFAULT_CURRENCY,
                internal_notes=sanitize_text(data.internalNotes, 5000),
            )
            if back_complete:
                ensure_feedback_token(job)
            self.repo.add_job(self.db, job)

            for entry in resolved:
                self.repo.add_assignment(self.db, job, entry["employee_id"], entry["pay_amount"])

            custom_tasks = [
                {
                    "title": t.title.strip(),
                    "description": t.description.strip() if t.description else None,
                    "order": t.order if t.order is not None else index,
                }
                for index, t in enumerate(data.tasks or [])
                if t.title and t.title.strip()
            ]
            if custom_tasks:
                self.repo.add_tasks(self.db, job, custom_tasks)
            else:
                self.repo.add_tasks(
                    self.db,
                    job,
                    [{"title": t.title, "description": t.description, "order": t.order or 0} for t in plan.tasks],
                )

            self.repo.add_job_event(
                self.db, job.id, "job_created", f'Job "{job.title}" created', actor_id=user.id
            )
            log_event(
                self.db,
                user.company_id,
                "job_created",
                entity_type="job",
                entity_id=job.id,
                description=f"Job {job.title} created",
                user_id=user.id,
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create job: {e}")
            raise HTTPException(status_code=500, detail="Failed to create job")

        logger.info(f"✅ Job {job.id} created with {len(resolved)} assignment(s)")

        if back_complete:
            self._invoice_back_created_job(job)

        self.db.refresh(job)
        await self._notify_assigned(job, [employees_by_id[e["employee_id"]] for e in resolved], resolved, user)
        if back_complete and customer.email:
            try:
                await send_job_completed_email(
                    to=customer.email,
                    customer_name=customer.first_name,
                    company_name=user.company.name,
                    job_title=job.title,
                    feedback_url=feedback_url(job.feedback_token),
                )
            except Exception as e:
                logger.error(f"❌ Failed to send completion email for job {job.id}: {e}")
        return self.get_job(job.id, user)

    def _invoice_back_created_job(self, job: Job) -> None:
        try:
            generate_invoice_from_job(self.db, job, status="sent")
            self.db.commit()
        except InvoiceGenerationError as e:
            self.db.rollback()
            logger.warning(f"⚠️ No invoice generated for back-created job {job.id}: {e}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to generate invoice for back-created job {job.id}: {e}")

    async def _notify_assigned(self, job: Job, employees: list[Employee], resolved: list[dict], user: User) -> None:
        pay_by_employee = {e["employee_id"]: e["pay_amount"] for e in resolved}
        address = build_full_address(job)
        for employee in employees:
            if not employee.email:
                continue
            pay = pay_by_employee.get(employee.id)
            try:
                await send_job_assigned_email(
                    to=employee.email,
                    employee_name=employee.first_name,
                    company_name=user.company.name,
                    job_title=job.title,
                    scheduled_for=format_display_datetime(job.scheduled_for),
                    location=address,
                    pay_amount=format_money(pay, job.currency) if pay is not None else None,
                )
                logger.info(f"📧 Assignment email sent to employee {employee.id}")
            except Exception as e:
                logger.error(f"❌ Failed to send assignment email to employee {employee.id}: {e}")

    # ========================================================================
    # UPDATE (assignment reconciliation)
    # ========================================================================

    async def update_job(self, job_id: int, data: JobUpdate, user: User) -> Job:
        job = self.get_job(job_id, user)
        fields = data.model_fields_set

        if not data.title or not data.customerId:
            raise HTTPException(status_code=400, detail="Title and customer are required")
        customer = self.repo.get_customer(self.db, data.customerId, user.company_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")

        plan = job.plan
        if "planId" in fields and data.planId:
            plan = self.repo.get_plan(self.db, data.planId, user.company_id)
            if not plan:
                raise HTTPException(status_code=404, detail="Cleaning plan not found")
        plan_price = plan.price if plan else None

        should_update_assignments = (
            "assignedEmployees" in fields and data.assignedEmployees is not None
        ) or "assignedTo" in fields

        resolved: list[dict] = []
        employees_by_id: dict[int, Employee] = {}
        if should_update_assignments:
            normalized = normalize_assignments(data.assignedEmployees, data.assignedTo, data.employeePay)
            employees_by_id = self._load_assignees(normalized, user.company_id)
            resolved = self._resolve_pay(normalized, employees_by_id, plan_price, data.employeePay)
        elif data.employeePay not in (None, ""):
            try:
                pay_value = float(data.employeePay)
            except (TypeError, ValueError):
                raise HTTPException(status_code=400, detail="Invalid employee pay amount")
            if not math.isfinite(pay_value) or pay_value < 0:
                raise HTTPException(status_code=400, detail="Invalid employee pay amount")
            if plan_price and pay_value > plan_price:
                raise HTTPException(status_code=400, detail="Employee pay cannot exceed cleaning plan price")

        existing_ids = [a.employee_id for a in job.assignments]
        next_ids = [r["employee_id"] for r in resolved] if should_update_assignments else existing_ids
        removed_ids, added_ids, kept_ids = diff_assignments(existing_ids, next_ids)
        assignments_changed = should_update_assignments and bool(removed_ids or added_ids)

        was_completed = job.status == "completed"
        if "status" in fields and data.status and data.status not in JOB_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid job status")
        next_status = "completed" if was_completed else (data.status or job.status or "scheduled")

        if "qualityRating" in fields and data.qualityRating is not None and not 1 <= data.qualityRating <= 5:
            raise HTTPException(status_code=400, detail="Quality rating must be between 1 and 5")

        previous_assignee_id = job.assigned_to
        removed_employees = [a.employee for a in job.assignments if a.employee_id in removed_ids]

        try:
            job.title = data.title
            job.customer_id = customer.id
            for field, column in UPDATE_FIELDS.items():
                if field not in fields:
                    continue
                value = getattr(data, field)
                if column in FREE_TEXT_COLUMNS:
                    value = sanitize_text(value, 5000)
                setattr(job, column, value)
            if "planId" in fields:
                job.plan_id = plan.id if plan and data.planId else None
            if "scheduledFor" in fields:
                job.scheduled_for = _parse_time(data.scheduledFor, "scheduled start time")
            if "scheduledEnd" in fields:
                job.scheduled_end = _parse_time(data.scheduledEnd, "scheduled end time")
            if "durationMinutes" in fields:
                job.duration_minutes = _positive_int(data.durationMinutes) or job.duration_minutes or 60

            job.status = next_status
            if should_update_assignments:
                job.assigned_to = resolved[0]["employee_id"] if resolved else None
                job.employee_pay = resolved[0]["pay_amount"] if resolved else None
            elif data.employeePay not in (None, ""):
                job.employee_pay = round(float(data.employeePay), 2)

            if assignments_changed and not was_completed:
                job.employee_accepted = False
                job.employee_accepted_at = None

            if next_status == "completed":
                if not was_completed:
                    completed_at = _parse_time(data.completedAt, "completion time") if "completedAt" in fields else None
                    job.completed_at = completed_at or job.completed_at or utc_now()
                ensure_feedback_token(job)

            if should_update_assignments:
                pay_by_employee = {r["employee_id"]: r["pay_amount"] for r in resolved}
                for assignment in list(job.assignments):
                    if assignment.employee_id in removed_ids:
                        job.assignments.remove(assignment)
                    elif assignment.employee_id in kept_ids:
                        assignment.pay_amount = pay_by_employee[assignment.employee_id]
                for employee_id in added_ids:
                    job.assignments.append(
                        JobAssignment(
                            company_id=job.company_id,
                            employee_id=employee_id,
                            pay_amount=pay_by_employee[employee_id],
                            status="assigned",
                        )
                    )

            if assignments_changed and was_completed:
                previous = self.db.get(Employee, previous_assignee_id) if previous_assignee_id else None
                current = employees_by_id.get(job.assigned_to) if job.assigned_to else None
                previous_name = previous.full_name if previous else "Unassigned"
                current_name = current.full_name if current else "Unassigned"
                self.repo.add_job_event(
                    self.db,
                    job.id,
                    "completed_assignee_changed",
                    f"Completed job reassigned from {previous_name} to {current_name}",
                    meta={
                        "previousAssigneeId": previous_assignee_id,
                        "newAssigneeId": job.assigned_to,
                        "removed": removed_ids,
                        "added": added_ids,
                        "changedBy": user.id,
                    },
                    actor_id=user.id,
                )

            log_event(
                self.db,
                user.company_id,
                "job_updated",
                entity_type="job",
                entity_id=job.id,
                user_id=user.id,
                meta={"assignmentsChanged": assignments_changed, "status": next_status},
            )
            self.db.commit()
        except HTTPException:
            self.db.rollback()
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update job {job_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update job")

        logger.info(f"✅ Job {job.id} updated (assignments changed: {assignments_changed})")

        if assignments_changed and not was_completed:
            job = self.get_job(job_id, user)
            scheduled = format_display_datetime(job.scheduled_for)
            for employee in removed_employees:
                if not employee or not employee.email:
                    continue
                try:
                    await send_job_unassigned_email(
                        to=employee.email,
                        employee_name=employee.first_name,
                        company_name=user.company.name,
                        job_title=job.title,
                        scheduled_for=scheduled,
                    )
                except Exception as e:
                    logger.error(f"❌ Failed to send unassigned email to employee {employee.id}: {e}")
            await self._notify_assigned(job, [employees_by_id[i] for i in added_ids], resolved, user)

        return self.get_job(job_id, user)

    # ========================================================================
    # DELETE
    # ========================================================================

    def delete_job(self, job_id: int, user: User) -> dict:
        job = self.get_job(job_id, user)
        if job.status == "completed" and user.role not in ADMIN_ROLES:
            raise HTTPException(status_code=403, detail="Only admins can delete completed jobs")

        title = job.title
        self.repo.delete_job(self.db, job)
        log_event(
            self.db,
            user.company_id,
            "job_deleted",
            entity_type="job",
            entity_id=job_id,
            description=f"Job {title} deleted",
            user_id=user.id,
        )
        self.db.commit()
        logger.info(f"🗑️ Job {job_id} deleted")
        return {"message": "Job deleted successfully", "id": job_id}

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def start_job(self, job_id: int, data: JobStartRequest, user: User) -> Job:
        job = self.get_job(job_id, user)
        if job.status == "completed":
            raise HTTPException(status_code=400, detail="Job is already completed")
        if job.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot start a cancelled job")

        job.status = "in-progress"
        self.repo.add_job_event(
            self.db,
            job.id,
            "job_started",
            f'Job "{job.title}" started',
            meta={
                "startedBy": user.id,
                "latitude": data.latitude,
                "longitude": data.longitude,
                "notes": sanitize_text(data.notes, 1000),
            },
            actor_id=user.id,
        )
        self.db.commit()
        logger.info(f"✅ Job {job.id} started")
        return self.get_job(job_id, user)

    async def complete_job(self, job_id: int, data: JobCompleteRequest, user: User) -> Job:
        job = self.get_job(job_id, user)
        if job.status == "completed":
            raise HTTPException(status_code=400, detail="Job is already completed")
        if job.status == "cancelled":
            raise HTTPException(status_code=400, detail="Cannot complete a cancelled job")
        if data.qualityRating is not None and not 1 <= data.qualityRating <= 5:
            raise HTTPException(status_code=400, detail="Quality rating must be between 1 and 5")

        try:
            mark_job_completed(self.db, job, actual_price=data.actualPrice)
            if data.qualityRating is not None:
                job.quality_rating = data.qualityRating
            notes = sanitize_text(data.notes, 2000)
            if notes:
                job.internal_notes = f"{job.internal_notes or ''}\n\nCompletion notes: {notes}".strip()
            self.repo.add_job_event(
                self.db,
                job.id,
                "job_completed",
                f'Job "{job.title}" completed',
                meta={"actualPrice": job.actual_price, "completedBy": user.id},
                actor_id=user.id,
            )
            log_event(
                self.db,
                user.company_id,
                "job_completed",
                entity_type="job",
                entity_id=job.id,
                user_id=user.id,
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to complete job {job_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to complete job")

        logger.info(f"✅ Job {job.id} completed")
        try:
            generate_invoice_from_job(self.db, job, status="sent", due_in_days=CHECKOUT_INVOICE_DUE_DAYS)
            self.db.commit()
        except InvoiceGenerationError as e:
            self.db.rollback()
            logger.info(f"ℹ️ Invoice not generated on completion of job {job.id}: {e}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to generate invoice on completion of job {job.id}: {e}")

        customer = job.customer
        if data.sendCustomerNotification and customer and customer.email:
            try:
                await send_job_completed_email(
                    to=customer.email,
                    customer_name=customer.first_name,
                    company_name=user.company.name,
                    job_title=job.title,
                    feedback_url=feedback_url(job.feedback_token),
                )
                logger.info(f"📧 Completion email sent for job {job.id}")
            except Exception as e:
                logger.error(f"❌ Failed to send completion email for job {job.id}: {e}")
        return self.get_job(job_id, user)

    async def cancel_job(self, job_id: int, data: JobCancelRequest, user: User) -> Job:
        reason = sanitize_text(data.reason, 1000)
        if not reason:
            raise HTTPException(status_code=400, detail="Cancellation reason is required")

        job = self.get_job(job_id, user)
        if job.status == "completed":
            raise HTTPException(status_code=400, detail="Cannot cancel a completed job")
        if job.status == "cancelled":
            raise HTTPException(status_code=400, detail="Job is already cancelled")

        cancelled_at = utc_now()
        job.status = "cancelled"
        job.internal_notes = (
            f"{job.internal_notes or ''}\n\nCancellation reason ({cancelled_at.isoformat()}): {reason}"
        ).strip()
        self.repo.add_job_event(
            self.db,
            job.id,
            "job_cancelled",
            f'Job "{job.title}" cancelled: {reason}',
            meta={"reason": reason, "cancelledBy": user.id},
            actor_id=user.id,
        )
        log_event(
            self.db,
            user.company_id,
            "job_cancelled",
            entity_type="job",
            entity_id=job.id,
            description=reason,
            user_id=user.id,
        )
        self.db.commit()
        logger.info(f"✅ Job {job.id} cancelled")

        scheduled = format_display_datetime(job.scheduled_for)
        recipients = []
        if data.notifyCustomer and job.customer and job.customer.email:
            recipients.append((job.customer.email, job.customer.first_name))
        if data.notifyEmployees:
            for assignment in job.assignments:
                employee = assignment.employee
                if assignment.status != "declined" and employee and employee.email:
                    recipients.append((employee.email, employee.first_name))

        for email, name in recipients:
            try:
                await send_job_cancelled_email(
                    to=email,
                    recipient_name=name,
                    company_name=user.company.name,
                    job_title=job.title,
                    scheduled_for=scheduled,
                    reason=reason,
                )
            except Exception as e:
                logger.error(f"❌ Failed to send cancellation email to {email}: {e}")
        return self.get_job(job_id, user)
