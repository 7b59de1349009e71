"""Job repository - Database operations for jobs"""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import (
    CleaningPlan,
    Customer,
    CustomerFeedback,
    Job,
    JobAssignment,
    JobEvent,
    JobTask,
    ShiftSwapRequest,
)
from ...models_invoice import Invoice
from ...utils.dates import end_of_day, start_of_day

ACTIVE_JOB_STATUSES = ("scheduled", "in-progress")


class JobRepository:
    @staticmethod
    def get_jobs(
        db: Session,
        company_id: int,
        search: Optional[str] = None,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        assigned_to: Optional[int] = None,
        date_filter: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
        sort: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> list[Job]:
        query = (
            db.query(Job)
            .options(joinedload(Job.customer), selectinload(Job.assignments))
            .filter(Job.company_id == company_id)
        )
        if search:
            term = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(Job.title).like(term),
                    func.lower(Job.description).like(term),
                    func.lower(Job.location).like(term),
                )
            )
        if status:
            query = query.filter(Job.status == status)
        if customer_id is not None:
            query = query.filter(Job.customer_id == customer_id)
        if assigned_to is not None:
            assigned_job_ids = db.query(JobAssignment.job_id).filter(
                JobAssignment.employee_id == assigned_to, JobAssignment.status != "declined"
            )
            query = query.filter(or_(Job.assigned_to == assigned_to, Job.id.in_(assigned_job_ids)))

        if date_filter == "today" and now is not None:
            query = query.filter(Job.scheduled_for >= start_of_day(now), Job.scheduled_for <= end_of_day(now))
        elif date_filter == "upcoming" and now is not None:
            query = query.filter(Job.scheduled_for >= now, Job.status.in_(ACTIVE_JOB_STATUSES))
        else:
            if start_date is not None:
                query = query.filter(Job.scheduled_for >= start_date)
            if end_date is not None:
                query = query.filter(Job.scheduled_for <= end_date)

        if sort == "updatedAt":
            query = query.order_by(Job.updated_at.desc(), Job.id.desc())
        else:
            query = query.order_by(Job.scheduled_for.desc(), Job.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_job_by_id(db: Session, job_id: int, company_id: int) -> Optional[Job]:
        return (
            db.query(Job)
            .options(
                joinedload(Job.customer),
                selectinload(Job.assignments).joinedload(JobAssignment.employee),
                selectinload(Job.tasks),
            )
            .filter(Job.id == job_id, Job.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_customer(db: Session, customer_id: Any, company_id: int) -> Optional[Customer]:
        return (
            db.query(Customer)
            .filter(Customer.id == customer_id, Customer.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_plan(db: Session, plan_id: Any, company_id: int) -> Optional[CleaningPlan]:
        return (
            db.query(CleaningPlan)
            .options(selectinload(CleaningPlan.tasks))
            .filter(CleaningPlan.id == plan_id, CleaningPlan.company_id == company_id)
            .first()
        )

    @staticmethod
    def add_job(db: Session, job: Job) -> Job:
        db.add(job)
        db.flush()
        return job

    @staticmethod
    def add_assignment(db: Session, job: Job, employee_id: int, pay_amount: Optional[float]) -> JobAssignment:
        assignment = JobAssignment(
            company_id=job.company_id,
            job_id=job.id,
            employee_id=employee_id,
            pay_amount=pay_amount,
            status="assigned",
        )
        db.add(assignment)
        return assignment

    @staticmethod
    def add_tasks(db: Session, job: Job, tasks: list[dict]) -> None:
        for task in tasks:
            db.add(
                JobTask(
                    job_id=job.id,
                    title=task["title"],
                    description=task.get("description"),
                    order=task.get("order", 0),
                )
            )

    @staticmethod
    def add_job_event(
        db: Session,
        job_id: int,
        event_type: str,
        message: Optional[str] = None,
        meta: Optional[dict] = None,
        actor_id: Optional[int] = None,
    ) -> JobEvent:
        """Stage a timeline event; the caller commits"""
        event = JobEvent(job_id=job_id, type=event_type, message=message, meta=meta, actor_id=actor_id)
        db.add(event)
        return event

    @staticmethod
    def get_events(db: Session, job_id: int) -> list[JobEvent]:
        return (
            db.query(JobEvent)
            .filter(JobEvent.job_id == job_id)
            .order_by(JobEvent.created_at.desc(), JobEvent.id.desc())
            .all()
        )

    @staticmethod
    def get_assignment(db: Session, job_id: int, employee_id: int) -> Optional[JobAssignment]:
        return (
            db.query(JobAssignment)
            .filter(JobAssignment.job_id == job_id, JobAssignment.employee_id == employee_id)
            .first()
        )

    @staticmethod
    def delete_job(db: Session, job: Job) -> None:
        """Delete a job, keeping its invoices and feedback with the link removed"""
        db.query(Invoice).filter(Invoice.job_id == job.id).update(
            {Invoice.job_id: None}, synchronize_session=False
        )
        db.query(CustomerFeedback).filter(CustomerFeedback.job_id == job.id).update(
            {CustomerFeedback.job_id: None}, synchronize_session=False
        )
        db.query(ShiftSwapRequest).filter(
            or_(ShiftSwapRequest.from_job_id == job.id, ShiftSwapRequest.to_job_id == job.id)
        ).delete(synchronize_session=False)
        db.delete(job)
