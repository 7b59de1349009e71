"""Invoice service - Business logic for invoicing and payment reminders"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import (
    DEFAULT_CURRENCY,
    JOB_INVOICE_DUE_DAYS,
    REMINDER_DAYS_AFTER_DUE,
    REMINDER_DAYS_BEFORE_DUE,
)
from ...email_service import send_invoice_email, send_payment_reminder_email
from ...models import Company, Customer, Job, User
from ...models_invoice import Invoice
from ...security_utils import sanitize_text
from ...utils.dates import format_display_date, parse_datetime, utc_now
from ..event_log.service import log_event
from .calculations import (
    calculate_invoice_totals,
    calculate_simple_totals,
    format_invoice_number,
    item_amount,
    money,
    next_invoice_sequence,
)
from .repository import InvoiceRepository
from .schemas import InvoiceCreate, InvoiceUpdate

logger = logging.getLogger(__name__)

INVOICE_STATUSES = ("draft", "sent", "paid", "overdue", "cancelled")
EDITABLE_STATUSES = ("draft", "sent")

DEFAULT_FOOTER = "Thank you for your business!"


class InvoiceGenerationError(ValueError):
    """Raised when an invoice cannot be generated from a job"""


def next_invoice_number(
    db: Session, company_id: int, customer_name: Optional[str] = None, invoice_date: Optional[datetime] = None
) -> str:
    last_number = InvoiceRepository.get_last_invoice_number(db, company_id)
    return format_invoice_number(next_invoice_sequence(last_number), customer_name, invoice_date)


def generate_invoice_from_job(
    db: Session,
    job: Job,
    tax_rate: float = 0,
    discount_amount: float = 0,
    notes: Optional[str] = None,
    terms: Optional[str] = None,
    footer: Optional[str] = None,
    due_in_days: int = JOB_INVOICE_DUE_DAYS,
    status: str = "draft",
    price: Optional[float] = None,
    numbered_on: Optional[datetime] = None,
) -> Invoice:
    """
    Build a single-line invoice for a job and stage it in the caller's session.

    Subtotal is the explicit price when given, otherwise the job's actual
    price, then its estimated price. With `numbered_on` the number carries the
    customer name and that date. The caller commits.

    Raises:
        InvoiceGenerationError: job has no customer or is already invoiced
    """
    if not job.customer_id:
        raise InvoiceGenerationError("Job has no customer to invoice")
    if InvoiceRepository.get_invoice_for_job(db, job.id):
        raise InvoiceGenerationError("An invoice already exists for this job")

    if price is None:
        price = job.actual_price if job.actual_price is not None else job.estimated_price
    subtotal = money(float(price or 0))
    totals = calculate_simple_totals(subtotal, tax_rate, discount_amount)

    now = utc_now()
    invoice = Invoice(
        company_id=job.company_id,
        invoice_number=next_invoice_number(
            db, job.company_id, job.customer.full_name if job.customer else None, numbered_on
        ),
        customer_id=job.customer_id,
        job_id=job.id,
        currency=job.currency or DEFAULT_CURRENCY,
        subtotal=totals["subtotal"],
        tax_rate=tax_rate or 0,
        tax_amount=totals["taxAmount"],
        discount_amount=discount_amount or 0,
        total=totals["total"],
        amount_paid=0,
        amount_due=totals["total"],
        status=status,
        issued_at=now,
        due_at=now + timedelta(days=due_in_days),
        notes=notes or f"Invoice for {job.title}",
        terms=terms or f"Payment is due within {due_in_days} days of the invoice date.",
        footer=footer or DEFAULT_FOOTER,
    )
    item = {
        "title": job.title,
        "description": job.description,
        "quantity": 1,
        "unit_price": subtotal,
        "amount": subtotal,
        "taxable": True,
    }
    InvoiceRepository.add_invoice(db, invoice, [item])
    logger.info(f"✅ Invoice {invoice.invoice_number} generated for job {job.id}")
    return invoice


async def email_invoice(invoice: Invoice, customer: Customer, company: Company) -> bool:
    """Email an invoice; returns False instead of raising"""
    try:
        await send_invoice_email(
            to=customer.email,
            customer_name=customer.first_name,
            company_name=company.name,
            invoice_number=invoice.invoice_number,
            amount=invoice.total or 0,
            currency=invoice.currency or DEFAULT_CURRENCY,
            due_date=format_display_date(invoice.due_at),
            payment_instructions=company.payment_instructions,
        )
        logger.info(f"📧 Invoice {invoice.invoice_number} emailed to {customer.email}")
        return True
    except Exception as e:
        logger.error(f"❌ Failed to send invoice {invoice.invoice_number}: {e}")
        return False


# ============================================================================
# PAYMENT REMINDERS
# ============================================================================


def mark_overdue_invoices(db: Session, now: Optional[datetime] = None, company_id: Optional[int] = None) -> int:
    """Sent invoices past their due date with money outstanding become overdue"""
    count = InvoiceRepository.mark_overdue(db, now or utc_now(), company_id)
    if count:
        logger.info(f"⏰ Marked {count} invoice(s) overdue")
    return count


def reminder_offset(invoice: Invoice, today: date) -> Optional[int]:
    """
    Days until the due date (negative once overdue) when today is a reminder day,
    otherwise None.
    """
    if not invoice.due_at or (invoice.amount_due or 0) <= 0:
        return None
    if invoice.last_reminder_at and invoice.last_reminder_at.date() == today:
        return None
    days_until_due = (invoice.due_at.date() - today).days
    if days_until_due > 0 and days_until_due in REMINDER_DAYS_BEFORE_DUE:
        return days_until_due
    if days_until_due < 0 and -days_until_due in REMINDER_DAYS_AFTER_DUE:
        return days_until_due
    return None


def find_invoices_needing_reminders(
    db: Session, today: Optional[date] = None, company_id: Optional[int] = None
) -> list[tuple[Invoice, int]]:
    today = today or utc_now().date()
    due = []
    for invoice in InvoiceRepository.get_unpaid_invoices(db, company_id):
        offset = reminder_offset(invoice, today)
        if offset is not None:
            due.append((invoice, offset))
    return due


async def send_reminder_for_invoice(db: Session, invoice: Invoice, days_offset: int) -> bool:
    customer = invoice.customer
    if not customer or not customer.email:
        logger.warning(f"⚠️ Invoice {invoice.id} has no customer email, reminder skipped")
        return False
    company = customer.company
    try:
        await send_payment_reminder_email(
            to=customer.email,
            customer_name=customer.first_name,
            company_name=company.name if company else "",
            invoice_number=invoice.invoice_number,
            amount_due=invoice.amount_due or 0,
            currency=invoice.currency or DEFAULT_CURRENCY,
            due_date=format_display_date(invoice.due_at),
            days_offset=days_offset,
            payment_instructions=company.payment_instructions if company else None,
        )
    except Exception as e:
        logger.error(f"❌ Failed to send reminder for invoice {invoice.invoice_number}: {e}")
        return False

    invoice.last_reminder_at = utc_now()
    log_event(
        db,
        invoice.company_id,
        "invoice_reminder_sent",
        entity_type="invoice",
        entity_id=invoice.id,
        description=f"Payment reminder sent for {invoice.invoice_number}",
        meta={"daysOffset": days_offset},
    )
    db.commit()
    logger.info(f"📧 Reminder sent for invoice {invoice.invoice_number} ({days_offset:+d} days)")
    return True


async def process_payment_reminders(db: Session, company_id: Optional[int] = None) -> dict:
    """Mark overdue invoices, then send reminders due today"""
    marked = mark_overdue_invoices(db, company_id=company_id)
    candidates = find_invoices_needing_reminders(db, company_id=company_id)
    sent = 0
    for invoice, offset in candidates:
        if await send_reminder_for_invoice(db, invoice, offset):
            sent += 1
    logger.info(f"✅ Payment reminders processed: {sent}/{len(candidates)} sent")
    return {
        "markedOverdue": marked,
        "processed": len(candidates),
        "sent": sent,
        "failed": len(candidates) - sent,
    }


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()

    def get_invoices(
        self,
        user: User,
        customer_id: Optional[int] = None,
        job_id: Optional[int] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Invoice]:
        statuses = [s.strip() for s in status.split(",") if s.strip()] if status else None
        try:
            start = parse_datetime(from_date)
            end = parse_datetime(to_date)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid date filter")
        return self.repo.get_invoices(
            self.db, user.company_id, customer_id, job_id, statuses, search, start, end, limit
        )

    def get_invoice(self, invoice_id: int, user: User) -> Invoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id, user.company_id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def _get_customer(self, customer_id: int, company_id: int) -> Customer:
        customer = (
            self.db.query(Customer)
            .filter(Customer.id == customer_id, Customer.company_id == company_id)
            .first()
        )
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    async def create_invoice(self, data: InvoiceCreate, user: User) -> Invoice:
        logger.info(f"📥 Creating invoice for company_id: {user.company_id}")
        if not data.customerId:
            raise HTTPException(status_code=400, detail="Customer is required")
        if not data.items:
            raise HTTPException(status_code=400, detail="At least one invoice item is required")

        customer = self._get_customer(data.customerId, user.company_id)

        job = None
        if data.jobId:
            job = self.db.query(Job).filter(Job.id == data.jobId, Job.company_id == user.company_id).first()
            if not job:
                raise HTTPException(status_code=404, detail="Job not found")

        today = utc_now().date()
        if data.dueAt and data.dueAt < today:
            raise HTTPException(status_code=400, detail="Due date cannot be in the past")

        items = []
        for item in data.items:
            raw = item.model_dump()
            items.append(
                {
                    "title": item.title,
                    "description": sanitize_text(item.description, 1000),
                    "quantity": item.quantity,
                    "unit_price": item.unitPrice,
                    "amount": item_amount(raw),
                    "taxable": item.taxable,
                }
            )
        subtotal = money(sum(i["amount"] for i in items))
        totals = calculate_simple_totals(subtotal, data.taxRate, data.discountAmount)

        invoice_date = job.scheduled_for if job and job.scheduled_for else utc_now()
        now = utc_now()
        invoice = Invoice(
            company_id=user.company_id,
            invoice_number=next_invoice_number(self.db, user.company_id, customer.full_name, invoice_date),
            customer_id=customer.id,
            job_id=job.id if job else None,
            currency=data.currency or DEFAULT_CURRENCY,
            subtotal=totals["subtotal"],
            tax_rate=data.taxRate or 0,
            tax_amount=totals["taxAmount"],
            discount_amount=data.discountAmount or 0,
            total=totals["total"],
            amount_paid=0,
            amount_due=totals["total"],
            status="draft",
            issued_at=now,
            due_at=datetime.combine(data.dueAt, datetime.min.time()) if data.dueAt else None,
            notes=sanitize_text(data.notes, 2000),
            terms=sanitize_text(data.terms, 2000),
            footer=sanitize_text(data.footer, 500),
        )
        self.repo.add_invoice(self.db, invoice, items)
        log_event(
            self.db,
            user.company_id,
            "invoice_created",
            entity_type="invoice",
            entity_id=invoice.id,
            description=f"Invoice {invoice.invoice_number} created",
            user_id=user.id,
        )
        self.db.commit()
        logger.info(f"✅ Invoice {invoice.invoice_number} created")

        if await email_invoice(invoice, customer, user.company):
            invoice.status = "sent"
            self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def update_invoice(self, invoice_id: int, data: InvoiceUpdate, user: User) -> Invoice:
        invoice = self.get_invoice(invoice_id, user)
        if invoice.status not in EDITABLE_STATUSES:
            raise HTTPException(status_code=400, detail="Only draft or sent invoices can be edited")

        fields = data.model_fields_set
        if "status" in fields and data.status is not None:
            if data.status not in INVOICE_STATUSES:
                raise HTTPException(status_code=400, detail="Invalid invoice status")
            invoice.status = data.status
        if "dueAt" in fields:
            invoice.due_at = datetime.combine(data.dueAt, datetime.min.time()) if data.dueAt else None
        for field, column, limit in (("notes", "notes", 2000), ("terms", "terms", 2000), ("footer", "footer", 500)):
            if field in fields:
                setattr(invoice, column, sanitize_text(getattr(data, field), limit))
        if "taxRate" in fields and data.taxRate is not None:
            invoice.tax_rate = data.taxRate
        if "discountAmount" in fields and data.discountAmount is not None:
            invoice.discount_amount = data.discountAmount

        if "items" in fields and data.items is not None:
            items = [
                {
                    "title": item.title,
                    "description": sanitize_text(item.description, 1000),
                    "quantity": item.quantity,
                    "unit_price": item.unitPrice,
                    "amount": money(item.quantity * item.unitPrice),
                    "taxable": item.taxable,
                }
                for item in data.items
            ]
            self.repo.replace_items(self.db, invoice, items)

        totals = calculate_invoice_totals(
            [{"quantity": i.quantity, "unitPrice": i.unit_price, "taxable": i.taxable} for i in invoice.items],
            invoice.tax_rate,
            invoice.discount_amount,
        )
        invoice.subtotal = totals["subtotal"]
        invoice.tax_amount = totals["taxAmount"]
        invoice.total = totals["total"]
        invoice.amount_due = money(totals["total"] - (invoice.amount_paid or 0))

        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"✅ Invoice {invoice.id} updated")
        return invoice

    def delete_invoice(self, invoice_id: int, user: User) -> dict:
        invoice = self.get_invoice(invoice_id, user)
        if invoice.status == "paid":
            raise HTTPException(status_code=400, detail="Paid invoices cannot be deleted")

        number = invoice.invoice_number
        self.db.delete(invoice)
        log_event(
            self.db,
            user.company_id,
            "invoice_deleted",
            entity_type="invoice",
            entity_id=invoice_id,
            description=f"Invoice {number} deleted",
            user_id=user.id,
        )
        self.db.commit()
        logger.info(f"🗑️ Invoice {invoice_id} deleted")
        return {"message": "Invoice deleted", "id": invoice_id}

    async def send_invoice(self, invoice_id: int, user: User) -> Invoice:
        invoice = self.get_invoice(invoice_id, user)
        if invoice.status in ("paid", "cancelled"):
            raise HTTPException(status_code=400, detail=f"Cannot send a {invoice.status} invoice")
        if not invoice.customer or not invoice.customer.email:
            raise HTTPException(status_code=400, detail="Customer has no email address")

        if not await email_invoice(invoice, invoice.customer, user.company):
            raise HTTPException(status_code=500, detail="Failed to send invoice email")

        if invoice.status == "draft":
            invoice.status = "sent"
        invoice.issued_at = invoice.issued_at or utc_now()
        log_event(
            self.db,
            user.company_id,
            "invoice_sent",
            entity_type="invoice",
            entity_id=invoice.id,
            user_id=user.id,
        )
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    async def send_reminder(self, invoice_id: int, user: User) -> Invoice:
        invoice = self.get_invoice(invoice_id, user)
        if invoice.status not in ("sent", "overdue") or (invoice.amount_due or 0) <= 0:
            raise HTTPException(status_code=400, detail="Only unpaid sent or overdue invoices can be reminded")

        days_offset = (invoice.due_at.date() - utc_now().date()).days if invoice.due_at else 0
        if not await send_reminder_for_invoice(self.db, invoice, days_offset):
            raise HTTPException(status_code=500, detail="Failed to send payment reminder")
        self.db.refresh(invoice)
        return invoice

    def generate_for_job(
        self,
        job_id: int,
        user: User,
        tax_rate: float = 0,
        discount_amount: float = 0,
        notes: Optional[str] = None,
        terms: Optional[str] = None,
        footer: Optional[str] = None,
        due_in_days: Optional[int] = None,
    ) -> Invoice:
        job = self.db.query(Job).filter(Job.id == job_id, Job.company_id == user.company_id).first()
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")
        try:
            invoice = generate_invoice_from_job(
                self.db,
                job,
                tax_rate=tax_rate,
                discount_amount=discount_amount,
                notes=sanitize_text(notes, 2000),
                terms=sanitize_text(terms, 2000),
                footer=sanitize_text(footer, 500),
                due_in_days=due_in_days or JOB_INVOICE_DUE_DAYS,
            )
        except InvoiceGenerationError as e:
            raise HTTPException(status_code=400, detail=str(e))

        log_event(
            self.db,
            user.company_id,
            "invoice_generated",
            entity_type="invoice",
            entity_id=invoice.id,
            description=f"Invoice {invoice.invoice_number} generated from job {job.id}",
            user_id=user.id,
        )
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    async def process_reminders(self, user: User) -> dict:
        return await process_payment_reminders(self.db, company_id=user.company_id)
