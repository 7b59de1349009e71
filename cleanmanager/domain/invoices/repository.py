"""Invoice repository - Database operations for invoices"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Customer
from ...models_invoice import Invoice, InvoiceItem


class InvoiceRepository:
    @staticmethod
    def get_invoices(
        db: Session,
        company_id: int,
        customer_id: Optional[int] = None,
        job_id: Optional[int] = None,
        statuses: Optional[list[str]] = None,
        search: Optional[str] = None,
        from_date: Optional[datetime] = None,
        to_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[Invoice]:
        query = (
            db.query(Invoice)
            .options(joinedload(Invoice.customer))
            .filter(Invoice.company_id == company_id)
        )
        if customer_id is not None:
            query = query.filter(Invoice.customer_id == customer_id)
        if job_id is not None:
            query = query.filter(Invoice.job_id == job_id)
        if statuses:
            query = query.filter(Invoice.status.in_(statuses))
        if search:
            term = f"%{search.strip().lower()}%"
            query = query.outerjoin(Customer, Invoice.customer_id == Customer.id).filter(
                or_(
                    func.lower(Invoice.invoice_number).like(term),
                    func.lower(Customer.first_name).like(term),
                    func.lower(Customer.last_name).like(term),
                    func.lower(Customer.email).like(term),
                )
            )
        if from_date is not None:
            query = query.filter(Invoice.issued_at >= from_date)
        if to_date is not None:
            query = query.filter(Invoice.issued_at <= to_date)

        query = query.order_by(Invoice.created_at.desc(), Invoice.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: int, company_id: int) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .options(selectinload(Invoice.items), selectinload(Invoice.payments), joinedload(Invoice.customer))
            .filter(Invoice.id == invoice_id, Invoice.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_last_invoice_number(db: Session, company_id: int) -> Optional[str]:
        row = (
            db.query(Invoice.invoice_number)
            .filter(Invoice.company_id == company_id)
            .order_by(Invoice.id.desc())
            .first()
        )
        return row[0] if row else None

    @staticmethod
    def get_invoice_for_job(db: Session, job_id: int) -> Optional[Invoice]:
        return db.query(Invoice).filter(Invoice.job_id == job_id).first()

    @staticmethod
    def add_invoice(db: Session, invoice: Invoice, items: list[dict]) -> Invoice:
        """Stage the invoice and its items; the caller commits"""
        for index, item in enumerate(items):
            invoice.items.append(
                InvoiceItem(
                    title=item["title"],
                    description=item.get("description"),
                    quantity=item.get("quantity", 1),
                    unit_price=item.get("unit_price", 0),
                    amount=item.get("amount", 0),
                    taxable=item.get("taxable", True),
                    sort_order=index,
                )
            )
        db.add(invoice)
        db.flush()
        return invoice

    @staticmethod
    def replace_items(db: Session, invoice: Invoice, items: list[dict]) -> None:
        invoice.items.clear()
        db.flush()
        for index, item in enumerate(items):
            invoice.items.append(
                InvoiceItem(
                    title=item["title"],
                    description=item.get("description"),
                    quantity=item.get("quantity", 1),
                    unit_price=item.get("unit_price", 0),
                    amount=item.get("amount", 0),
                    taxable=item.get("taxable", True),
                    sort_order=index,
                )
            )

    @staticmethod
    def get_unpaid_invoices(db: Session, company_id: Optional[int] = None) -> list[Invoice]:
        """Sent or overdue invoices with a due date, across companies unless one is given"""
        query = (
            db.query(Invoice)
            .options(joinedload(Invoice.customer))
            .filter(Invoice.status.in_(["sent", "overdue"]), Invoice.due_at.isnot(None))
        )
        if company_id is not None:
            query = query.filter(Invoice.company_id == company_id)
        return query.order_by(Invoice.id.asc()).all()

    @staticmethod
    def mark_overdue(db: Session, now: datetime, company_id: Optional[int] = None) -> int:
        query = db.query(Invoice).filter(
            Invoice.status == "sent", Invoice.due_at.isnot(None), Invoice.due_at < now, Invoice.amount_due > 0
        )
        if company_id is not None:
            query = query.filter(Invoice.company_id == company_id)
        count = query.update({Invoice.status: "overdue"}, synchronize_session=False)
        db.commit()
        return count
