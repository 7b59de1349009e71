"""Shift swap repository"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Employee, Job, ShiftSwapRequest


class ShiftSwapRepository:
    @staticmethod
    def _query(db: Session):
        return db.query(ShiftSwapRequest).options(
            joinedload(ShiftSwapRequest.from_employee),
            joinedload(ShiftSwapRequest.to_employee),
            joinedload(ShiftSwapRequest.from_job),
            joinedload(ShiftSwapRequest.to_job),
        )

    @staticmethod
    def get_swaps(
        db: Session, company_id: int, status: Optional[str] = None, employee_id: Optional[int] = None
    ) -> list[ShiftSwapRequest]:
        query = ShiftSwapRepository._query(db).filter(ShiftSwapRequest.company_id == company_id)
        if status:
            query = query.filter(ShiftSwapRequest.status == status)
        if employee_id:
            query = query.filter(
                or_(
                    ShiftSwapRequest.from_employee_id == employee_id,
                    ShiftSwapRequest.to_employee_id == employee_id,
                )
            )
        return query.order_by(ShiftSwapRequest.created_at.desc(), ShiftSwapRequest.id.desc()).all()

    @staticmethod
    def get_swap(db: Session, swap_id: int, company_id: int) -> Optional[ShiftSwapRequest]:
        return (
            ShiftSwapRepository._query(db)
            .filter(ShiftSwapRequest.id == swap_id, ShiftSwapRequest.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_jobs(db: Session, job_ids: list[int], company_id: int) -> dict[int, Job]:
        jobs = (
            db.query(Job)
            .options(selectinload(Job.assignments))
            .filter(Job.id.in_(job_ids), Job.company_id == company_id)
            .all()
        )
        return {job.id: job for job in jobs}

    @staticmethod
    def get_employees(db: Session, employee_ids: list[int], company_id: int) -> dict[int, Employee]:
        employees = (
            db.query(Employee)
            .filter(Employee.id.in_(employee_ids), Employee.company_id == company_id)
            .all()
        )
        return {employee.id: employee for employee in employees}

    @staticmethod
    def get_active_employees(db: Session, company_id: int) -> list[Employee]:
        return (
            db.query(Employee)
            .filter(Employee.company_id == company_id, Employee.status == "active")
            .order_by(Employee.first_name.asc(), Employee.last_name.asc())
            .all()
        )

    @staticmethod
    def get_scheduled_jobs_between(db: Session, company_id: int, start: datetime, end: datetime) -> list[Job]:
        return (
            db.query(Job)
            .options(joinedload(Job.customer), joinedload(Job.assignee), selectinload(Job.assignments))
            .filter(
                Job.company_id == company_id,
                Job.status == "scheduled",
                Job.scheduled_for >= start,
                Job.scheduled_for <= end,
            )
            .order_by(Job.scheduled_for.asc())
            .all()
        )

    @staticmethod
    def add_swap(db: Session, swap: ShiftSwapRequest) -> ShiftSwapRequest:
        db.add(swap)
        db.commit()
        db.refresh(swap)
        return swap
