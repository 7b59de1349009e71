"""Payment repository"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models_invoice import Invoice, Payment


class PaymentRepository:
    @staticmethod
    def get_payments(
        db: Session, company_id: int, invoice_id: Optional[int] = None, customer_id: Optional[int] = None
    ) -> list[Payment]:
        query = (
            db.query(Payment)
            .options(joinedload(Payment.invoice))
            .filter(Payment.company_id == company_id)
        )
        if invoice_id is not None:
            query = query.filter(Payment.invoice_id == invoice_id)
        if customer_id is not None:
            query = query.filter(Payment.customer_id == customer_id)
        return query.order_by(Payment.created_at.desc(), Payment.id.desc()).all()

    @staticmethod
    def get_payment_by_id(db: Session, payment_id: int, company_id: int) -> Optional[Payment]:
        return (
            db.query(Payment)
            .options(joinedload(Payment.invoice))
            .filter(Payment.id == payment_id, Payment.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_invoice(db: Session, invoice_id: int, company_id: int) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .options(joinedload(Invoice.customer))
            .filter(Invoice.id == invoice_id, Invoice.company_id == company_id)
            .first()
        )

    @staticmethod
    def sum_payments(db: Session, invoice_id: int) -> float:
        total = (
            db.query(func.coalesce(func.sum(Payment.amount), 0))
            .filter(Payment.invoice_id == invoice_id, Payment.status == "completed")
            .scalar()
        )
        return float(total or 0)
