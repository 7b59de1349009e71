"""Employee portal service - assigned jobs, responses, tasks and own account"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_job_response_email
from ...models import Employee, Job, JobTask
from ...security_utils import check_password_strength, hash_password, sanitize_text, verify_password
from ...utils.dates import utc_now
from ..company.service import office_recipients
from ..event_log.service import log_event
from ..jobs.repository import JobRepository
from .repository import EmployeePortalRepository
from .schemas import PasswordChangeRequest

logger = logging.getLogger(__name__)

TASK_STATUSES = ("pending", "in-progress", "completed")


class EmployeePortalService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = EmployeePortalRepository()

    def get_jobs(self, employee: Employee, status: Optional[str] = None) -> list[Job]:
        return self.repo.get_jobs_for_employee(self.db, employee.id, employee.company_id, status)

    def get_job(self, job_id: int, employee: Employee) -> Job:
        if not self.repo.get_assignment(self.db, job_id, employee.id, employee.company_id):
            raise HTTPException(status_code=404, detail="Job not found or not assigned to you")
        return self.repo.get_job(self.db, job_id, employee.company_id)

    async def accept_job(self, job_id: int, employee: Employee) -> tuple[Job, bool]:
        """Returns the job and whether every assignee has now accepted"""
        assignment = self.repo.get_assignment(
            self.db, job_id, employee.id, employee.company_id, include_declined=True
        )
        if not assignment:
            raise HTTPException(status_code=404, detail="Job not found or not assigned to you")
        if assignment.status in ("accepted", "completed"):
            raise HTTPException(status_code=400, detail="You have already accepted this job")

        now = utc_now()
        assignment.status = "accepted"
        assignment.accepted_at = now
        self.db.flush()

        job = self.repo.get_job(self.db, job_id, employee.company_id)
        all_accepted = bool(job.assignments) and all(
            a.status in ("accepted", "completed") for a in job.assignments
        )
        if all_accepted:
            job.employee_accepted = True
            job.employee_accepted_at = now
        if job.assigned_to is None:
            job.assigned_to = employee.id

        JobRepository.add_job_event(
            self.db,
            job.id,
            "job_accepted",
            f"{employee.full_name} accepted the job",
            meta={"employeeId": employee.id, "allAccepted": all_accepted},
        )
        log_event(
            self.db,
            employee.company_id,
            "job_accepted",
            entity_type="job",
            entity_id=job.id,
            employee_id=employee.id,
        )
        self.db.commit()
        logger.info(f"✅ Employee {employee.id} accepted job {job.id} (all accepted: {all_accepted})")

        if all_accepted:
            await self._notify_response(job, employee, accepted=True, include_customer=True)
        return self.repo.get_job(self.db, job_id, employee.company_id), all_accepted

    async def decline_job(self, job_id: int, employee: Employee, reason: Optional[str] = None) -> Job:
        assignment = self.repo.get_assignment(self.db, job_id, employee.id, employee.company_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Job not found or not assigned to you")
        job = self.repo.get_job(self.db, job_id, employee.company_id)
        if job.status == "completed":
            raise HTTPException(status_code=400, detail="Completed jobs cannot be declined")

        now = utc_now()
        assignment.status = "declined"
        assignment.accepted_at = None

        remaining = [a for a in job.assignments if a.status != "declined"]
        job.assigned_to = remaining[0].employee_id if remaining else None
        job.employee_accepted = False
        job.employee_accepted_at = None

        reason = sanitize_text(reason, 1000)
        note = f"[Job declined by {employee.full_name} - {now.isoformat()}]"
        if reason:
            note += f"\nReason: {reason}"
        job.internal_notes = f"{job.internal_notes or ''}\n\n{note}".strip()

        JobRepository.add_job_event(
            self.db,
            job.id,
            "job_declined",
            f"{employee.full_name} declined the job",
            meta={"employeeId": employee.id, "reason": reason},
        )
        log_event(
            self.db,
            employee.company_id,
            "job_declined",
            entity_type="job",
            entity_id=job.id,
            employee_id=employee.id,
            description=reason,
        )
        self.db.commit()
        logger.info(f"✅ Employee {employee.id} declined job {job.id}")

        await self._notify_response(job, employee, accepted=False, include_customer=False)
        return job

    async def _notify_response(self, job: Job, employee: Employee, accepted: bool, include_customer: bool) -> None:
        company = employee.company
        admins = office_recipients(self.db, company, "employeeUpdates")
        recipients = [(admin.email, admin.first_name) for admin in admins]
        if include_customer and job.customer and job.customer.email:
            recipients.append((job.customer.email, job.customer.first_name))

        for email, name in recipients:
            try:
                await send_job_response_email(
                    to=email,
                    recipient_name=name,
                    employee_name=employee.full_name,
                    job_title=job.title,
                    accepted=accepted,
                    company_name=company.name,
                )
            except Exception as e:
                logger.error(f"❌ Failed to send job response email to {email}: {e}")

    def update_task(self, job_id: int, task_id: int, status: Optional[str], employee: Employee) -> JobTask:
        if not self.repo.get_assignment(self.db, job_id, employee.id, employee.company_id):
            raise HTTPException(status_code=404, detail="Job not found or not assigned to you")
        if status not in TASK_STATUSES:
            raise HTTPException(status_code=400, detail="Status must be pending, in-progress, or completed")

        task = self.repo.get_task(self.db, job_id, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")

        task.status = status
        if status == "completed":
            task.completed_by = employee.id
            task.completed_at = utc_now()
        else:
            task.completed_by = None
            task.completed_at = None
        self.db.commit()
        self.db.refresh(task)
        return task

    def change_password(self, data: PasswordChangeRequest, employee: Employee) -> dict:
        if not data.currentPassword or not data.newPassword:
            raise HTTPException(status_code=400, detail="Current password and new password are required")
        if not verify_password(data.currentPassword, employee.password_hash):
            raise HTTPException(status_code=400, detail="Current password is incorrect")
        problems = check_password_strength(data.newPassword)
        if problems:
            raise HTTPException(status_code=400, detail=problems[0])

        employee.password_hash = hash_password(data.newPassword)
        self.db.commit()
        logger.info(f"✅ Employee {employee.id} changed password")
        return {"message": "Password updated successfully"}
