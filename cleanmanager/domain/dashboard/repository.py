"""Dashboard repository - aggregate queries for the statistics view"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Customer, Employee, Job, JobTask
from ...models_invoice import Invoice

ACTIVE_STATUSES = ("scheduled", "in-progress")


class DashboardRepository:
    @staticmethod
    def paid_revenue(db: Session, company_id: int, start: datetime, end: datetime) -> float:
        total = (
            db.query(func.coalesce(func.sum(Invoice.total), 0))
            .filter(
                Invoice.company_id == company_id,
                Invoice.status == "paid",
                Invoice.paid_at >= start,
                Invoice.paid_at <= end,
            )
            .scalar()
        )
        return float(total or 0)

    @staticmethod
    def count_jobs(
        db: Session,
        company_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        statuses: Optional[tuple[str, ...]] = None,
        scheduled_before: Optional[datetime] = None,
    ) -> int:
        """Jobs scheduled inside [start, end], optionally limited by status"""
        query = db.query(func.count(Job.id)).filter(Job.company_id == company_id)
        if start is not None:
            query = query.filter(Job.scheduled_for >= start)
        if end is not None:
            query = query.filter(Job.scheduled_for <= end)
        if statuses:
            query = query.filter(Job.status.in_(statuses))
        if scheduled_before is not None:
            query = query.filter(Job.scheduled_for < scheduled_before)
        return query.scalar() or 0

    @staticmethod
    def count_completed(
        db: Session, company_id: int, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> int:
        query = db.query(func.count(Job.id)).filter(Job.company_id == company_id, Job.status == "completed")
        if start is not None:
            query = query.filter(Job.completed_at >= start)
        if end is not None:
            query = query.filter(Job.completed_at <= end)
        return query.scalar() or 0

    @staticmethod
    def count_active_employees(db: Session, company_id: int) -> int:
        return (
            db.query(func.count(Employee.id))
            .filter(Employee.company_id == company_id, Employee.status == "active")
            .scalar()
            or 0
        )

    @staticmethod
    def count_customers(db: Session, company_id: int) -> int:
        return (
            db.query(func.count(Customer.id))
            .filter(Customer.company_id == company_id, Customer.status == "active")
            .scalar()
            or 0
        )

    @staticmethod
    def count_pending_tasks(db: Session, company_id: int, start: datetime, end: datetime) -> int:
        return (
            db.query(func.count(JobTask.id))
            .join(Job, JobTask.job_id == Job.id)
            .filter(
                Job.company_id == company_id,
                JobTask.status.in_(("pending", "in-progress")),
                Job.status.in_(ACTIVE_STATUSES),
                Job.scheduled_for >= start,
                Job.scheduled_for <= end,
            )
            .scalar()
            or 0
        )

    @staticmethod
    def outstanding_invoices(db: Session, company_id: int) -> tuple[int, float]:
        count, amount = (
            db.query(func.count(Invoice.id), func.coalesce(func.sum(Invoice.amount_due), 0))
            .filter(Invoice.company_id == company_id, Invoice.status.in_(("sent", "overdue")))
            .one()
        )
        return count or 0, float(amount or 0)
