"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Customer


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def get_customers(
        db: Session,
        company_id: int,
        search: Optional[str] = None,
        customer_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Customer]:
        query = db.query(Customer).filter(Customer.company_id == company_id)

        if search:
            term = f"%{search.strip().lower()}%"
            query = query.filter(
                or_(
                    func.lower(Customer.first_name).like(term),
                    func.lower(Customer.last_name).like(term),
                    func.lower(Customer.email).like(term),
                    func.lower(func.coalesce(Customer.phone, "")).like(term),
                )
            )
        if customer_type:
            query = query.filter(Customer.customer_type == customer_type)
        if status:
            query = query.filter(Customer.status == status)

        return query.order_by(Customer.created_at.desc(), Customer.id.desc()).all()

    @staticmethod
    def get_customer_by_id(db: Session, customer_id: int, company_id: int) -> Optional[Customer]:
        return (
            db.query(Customer)
            .filter(Customer.id == customer_id, Customer.company_id == company_id)
            .first()
        )

    @staticmethod
    def find_duplicate(
        db: Session,
        company_id: int,
        email: Optional[str],
        phone: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> Optional[tuple[str, Customer]]:
        """Return ("email"|"phone", customer) for the first clash inside the company"""
        base = db.query(Customer).filter(Customer.company_id == company_id)
        if exclude_id is not None:
            base = base.filter(Customer.id != exclude_id)

        if email:
            match = base.filter(func.lower(Customer.email) == email.lower()).first()
            if match:
                return "email", match
        if phone:
            match = base.filter(Customer.phone == phone).first()
            if match:
                return "phone", match
        return None

    @staticmethod
    def create_customer(db: Session, company_id: int, **customer_data) -> Customer:
        customer = Customer(company_id=company_id, **customer_data)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def update_customer(db: Session, customer: Customer, **updates) -> Customer:
        for key, value in updates.items():
            if hasattr(customer, key):
                setattr(customer, key, value)
        db.commit()
        db.refresh(customer)
        return customer
