"""Customer portal repository - records scoped to a single customer"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import BookingRequest, CleaningPlan, Company, Customer, Job
from ...models_invoice import Invoice


class CustomerPortalRepository:
    @staticmethod
    def get_customer_by_email(db: Session, email: str) -> Optional[Customer]:
        return (
            db.query(Customer)
            .options(joinedload(Customer.company))
            .filter(func.lower(Customer.email) == email.strip().lower(), Customer.status == "active")
            .order_by(Customer.id.asc())
            .first()
        )

    @staticmethod
    def get_jobs(db: Session, customer: Customer) -> list[Job]:
        return (
            db.query(Job)
            .options(selectinload(Job.tasks))
            .filter(Job.customer_id == customer.id, Job.company_id == customer.company_id)
            .order_by(Job.scheduled_for.desc(), Job.id.desc())
            .all()
        )

    @staticmethod
    def get_invoices(db: Session, customer: Customer) -> list[Invoice]:
        return (
            db.query(Invoice)
            .options(selectinload(Invoice.items), selectinload(Invoice.payments), joinedload(Invoice.customer))
            .filter(Invoice.customer_id == customer.id, Invoice.company_id == customer.company_id)
            .order_by(Invoice.issued_at.desc(), Invoice.id.desc())
            .all()
        )

    @staticmethod
    def get_bookings(db: Session, customer: Customer) -> list[BookingRequest]:
        return (
            db.query(BookingRequest)
            .options(joinedload(BookingRequest.plan))
            .filter(BookingRequest.customer_id == customer.id)
            .order_by(BookingRequest.created_at.desc(), BookingRequest.id.desc())
            .all()
        )

    @staticmethod
    def get_plan(db: Session, plan_id: int, company_id: int) -> Optional[CleaningPlan]:
        return (
            db.query(CleaningPlan)
            .filter(CleaningPlan.id == plan_id, CleaningPlan.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_company(db: Session, company_id: int) -> Optional[Company]:
        return db.get(Company, company_id)

    @staticmethod
    def save(db: Session, obj):
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    @staticmethod
    def email_taken(db: Session, company_id: int, email: str, exclude_id: int) -> bool:
        return (
            db.query(Customer.id)
            .filter(
                Customer.company_id == company_id,
                func.lower(Customer.email) == email.lower(),
                Customer.id != exclude_id,
            )
            .first()
            is not None
        )
