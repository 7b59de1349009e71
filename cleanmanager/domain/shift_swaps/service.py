"""Shift swap service - swap requests between two employees' scheduled jobs"""

import logging
from datetime import timedelta
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_shift_swap_email
from ...models import Company, Employee, Job, ShiftSwapRequest, User
from ...security_utils import sanitize_text
from ...utils.dates import utc_now
from ..event_log.service import log_event
from ..jobs.repository import JobRepository
from .repository import ShiftSwapRepository
from .schemas import ShiftSwapCreate

logger = logging.getLogger(__name__)

SWAP_DECISIONS = ("approved", "rejected")
OPTIONS_WINDOW_DAYS = 30


class SingleAssigneeError(ValueError):
    """Raised when a job has more than one active assignee"""


def swap_assignee(job: Job) -> Optional[int]:
    """The single employee working a job; None when unassigned"""
    active = [a.employee_id for a in job.assignments if a.status != "declined"]
    if len(active) > 1:
        raise SingleAssigneeError("Shift swaps are only available for jobs with a single assigned employee.")
    if active:
        return active[0]
    return job.assigned_to


def _job_id(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class ShiftSwapService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ShiftSwapRepository()

    def get_swaps(self, company_id: int, status: Optional[str] = None, employee_id: Optional[int] = None):
        return self.repo.get_swaps(self.db, company_id, status, employee_id)

    def _validate_pair(
        self, company_id: int, data: ShiftSwapCreate
    ) -> tuple[Job, Job, Employee, Employee]:
        from_job_id, to_job_id = _job_id(data.fromJobId), _job_id(data.toJobId)
        if not from_job_id or not to_job_id or from_job_id == to_job_id:
            raise HTTPException(status_code=400, detail="Two different jobs are required")

        jobs = self.repo.get_jobs(self.db, [from_job_id, to_job_id], company_id)
        if len(jobs) != 2:
            raise HTTPException(status_code=404, detail="Jobs not found")
        from_job, to_job = jobs[from_job_id], jobs[to_job_id]

        try:
            from_employee_id, to_employee_id = swap_assignee(from_job), swap_assignee(to_job)
        except SingleAssigneeError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not from_employee_id or not to_employee_id:
            raise HTTPException(status_code=400, detail="Both jobs must be assigned to an employee")
        if from_employee_id == to_employee_id:
            raise HTTPException(status_code=400, detail="Jobs must belong to two different employees")
        if (from_job.status or "").lower() != "scheduled" or (to_job.status or "").lower() != "scheduled":
            raise HTTPException(status_code=400, detail="Both jobs must be scheduled to request a swap")

        employees = self.repo.get_employees(self.db, [from_employee_id, to_employee_id], company_id)
        if len(employees) != 2:
            raise HTTPException(status_code=404, detail="Employees not found")
        return from_job, to_job, employees[from_employee_id], employees[to_employee_id]

    async def create_swap(
        self,
        data: ShiftSwapCreate,
        company: Company,
        requested_by: Optional[Employee] = None,
    ) -> ShiftSwapRequest:
        """Office swap when `requested_by` is None, otherwise an employee asking to swap their own job"""
        from_job, to_job, from_employee, to_employee = self._validate_pair(company.id, data)
        if requested_by is not None and from_employee.id != requested_by.id:
            raise HTTPException(status_code=403, detail="You can only request swaps for your own job")

        swap = self.repo.add_swap(
            self.db,
            ShiftSwapRequest(
                company_id=company.id,
                from_employee_id=from_employee.id,
                to_employee_id=to_employee.id,
                from_job_id=from_job.id,
                to_job_id=to_job.id,
                requested_by_employee_id=requested_by.id if requested_by else None,
                requested_by_role="employee" if requested_by else "company",
                status="pending",
                reason=sanitize_text(data.reason, 1000),
            ),
        )
        logger.info(f"✅ Shift swap {swap.id} requested: job {from_job.id} <-> job {to_job.id}")

        await self._notify(company, from_employee, "requested", from_job.title, to_job.title)
        await self._notify(company, to_employee, "requested", to_job.title, from_job.title)
        return self.repo.get_swap(self.db, swap.id, company.id)

    async def decide(self, swap_id: int, status: Optional[str], user: User) -> ShiftSwapRequest:
        if status not in SWAP_DECISIONS:
            raise HTTPException(status_code=400, detail="Invalid request")
        swap = self.repo.get_swap(self.db, swap_id, user.company_id)
        if not swap:
            raise HTTPException(status_code=404, detail="Swap request not found")
        if swap.status != "pending":
            raise HTTPException(status_code=400, detail="Swap request already processed")
        if status == "approved" and not self._still_swappable(swap):
            raise HTTPException(status_code=400, detail="Jobs have changed since the swap was requested")

        now = utc_now()
        try:
            if status == "approved":
                self._apply_swap(swap)
            swap.status = status
            swap.reviewed_at = now
            log_event(
                self.db,
                user.company_id,
                f"shift_swap_{status}",
                entity_type="shift_swap",
                entity_id=swap.id,
                user_id=user.id,
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {status[:-1]} shift swap {swap.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update shift swap")

        logger.info(f"✅ Shift swap {swap.id} {status} by user {user.id}")
        company = user.company
        from_title = swap.from_job.title if swap.from_job else "Current assignment"
        to_title = swap.to_job.title if swap.to_job else "Current assignment"
        await self._notify(company, swap.from_employee, status, from_title, to_title)
        await self._notify(company, swap.to_employee, status, to_title, from_title)
        return swap

    @staticmethod
    def _still_swappable(swap: ShiftSwapRequest) -> bool:
        """Both jobs still scheduled and still held by the employees named on the request"""
        for job, employee_id in ((swap.from_job, swap.from_employee_id), (swap.to_job, swap.to_employee_id)):
            if not job or (job.status or "").lower() != "scheduled":
                return False
            try:
                if swap_assignee(job) != employee_id:
                    return False
            except SingleAssigneeError:
                return False
        return True

    def _apply_swap(self, swap: ShiftSwapRequest) -> None:
        """Exchange the two employees on both jobs; acceptance starts over"""
        for job, old_employee, new_employee in (
            (swap.from_job, swap.from_employee_id, swap.to_employee_id),
            (swap.to_job, swap.to_employee_id, swap.from_employee_id),
        ):
            for stale in [a for a in job.assignments if a.employee_id == new_employee]:
                job.assignments.remove(stale)
            self.db.flush()

            job.assigned_to = new_employee
            job.employee_accepted = False
            job.employee_accepted_at = None
            for assignment in job.assignments:
                if assignment.employee_id == old_employee:
                    assignment.employee_id = new_employee
                    assignment.status = "assigned"
                    assignment.accepted_at = None
            JobRepository.add_job_event(
                self.db,
                job.id,
                "shift_swapped",
                "Assignment changed by an approved shift swap",
                meta={"swapId": swap.id, "fromEmployeeId": old_employee, "toEmployeeId": new_employee},
            )
        self.db.flush()

    async def _notify(
        self, company: Company, employee: Optional[Employee], status: str, own_title: str, other_title: str
    ) -> None:
        if not employee or not employee.email:
            return
        try:
            await send_shift_swap_email(
                to=employee.email,
                employee_name=employee.first_name,
                company_name=company.name,
                status=status,
                from_job_title=own_title,
                to_job_title=other_title,
            )
        except Exception as e:
            logger.error(f"❌ Failed to send shift swap email to {employee.email}: {e}")

    def get_options(self, employee: Employee) -> dict:
        """Active colleagues and scheduled jobs in the next 30 days"""
        now = utc_now()
        employees = self.repo.get_active_employees(self.db, employee.company_id)
        jobs = self.repo.get_scheduled_jobs_between(
            self.db, employee.company_id, now, now + timedelta(days=OPTIONS_WINDOW_DAYS)
        )

        job_options = []
        for job in jobs:
            assignment_ids = [a.employee_id for a in job.assignments if a.status != "declined"]
            job_options.append(
                {
                    "id": job.id,
                    "title": job.title,
                    "scheduledFor": job.scheduled_for,
                    "scheduledEnd": job.scheduled_end,
                    "assignedTo": assignment_ids[0] if len(assignment_ids) == 1 else job.assigned_to,
                    "customerName": job.customer.full_name if job.customer else "Customer",
                    "assigneeName": job.assignee.full_name if job.assignee else "Unassigned",
                }
            )
        return {
            "employees": [
                {"id": e.id, "firstName": e.first_name, "lastName": e.last_name, "name": e.full_name}
                for e in employees
            ],
            "jobs": job_options,
        }
