"""Invoice domain schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class InvoiceItemInput(BaseModel):
    title: str
    description: Optional[str] = None
    quantity: float = 1
    unitPrice: float = 0
    amount: Optional[float] = None
    taxable: bool = True

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Item title is required")
        return v.strip()


class InvoiceCreate(BaseModel):
    customerId: Optional[int] = None
    jobId: Optional[int] = None
    items: list[InvoiceItemInput] = []
    taxRate: float = 0
    discountAmount: float = 0
    currency: Optional[str] = None
    dueAt: Optional[date] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    footer: Optional[str] = None


class InvoiceUpdate(BaseModel):
    items: Optional[list[InvoiceItemInput]] = None
    taxRate: Optional[float] = None
    discountAmount: Optional[float] = None
    dueAt: Optional[date] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    footer: Optional[str] = None


class GenerateInvoiceRequest(BaseModel):
    taxRate: float = 0
    discountAmount: float = 0
    notes: Optional[str] = None
    terms: Optional[str] = None
    footer: Optional[str] = None
    dueInDays: Optional[int] = None


class InvoiceItemResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    quantity: float
    unitPrice: float
    amount: float
    taxable: bool
    sortOrder: int


class PaymentSummary(BaseModel):
    id: int
    amount: float
    method: Optional[str] = None
    status: Optional[str] = None
    reference: Optional[str] = None
    paidAt: Optional[datetime] = None


class CustomerSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


class InvoiceResponse(BaseModel):
    id: int
    invoiceNumber: str
    customerId: int
    jobId: Optional[int] = None
    customer: Optional[CustomerSummary] = None
    currency: Optional[str] = None
    subtotal: float
    taxRate: float
    taxAmount: float
    discountAmount: float
    total: float
    amountPaid: float
    amountDue: float
    status: str
    issuedAt: Optional[datetime] = None
    dueAt: Optional[datetime] = None
    paidAt: Optional[datetime] = None
    lastReminderAt: Optional[datetime] = None
    notes: Optional[str] = None
    terms: Optional[str] = None
    footer: Optional[str] = None
    items: Optional[list[InvoiceItemResponse]] = None
    payments: Optional[list[PaymentSummary]] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, inv, include_details: bool = False) -> "InvoiceResponse":
        customer = None
        if inv.customer is not None:
            customer = CustomerSummary(id=inv.customer.id, name=inv.customer.full_name, email=inv.customer.email)

        items = None
        payments = None
        if include_details:
            items = [
                InvoiceItemResponse(
                    id=i.id,
                    title=i.title,
                    description=i.description,
                    quantity=i.quantity or 0,
                    unitPrice=i.unit_price or 0,
                    amount=i.amount or 0,
                    taxable=bool(i.taxable),
                    sortOrder=i.sort_order or 0,
                )
                for i in inv.items
            ]
            payments = [
                PaymentSummary(
                    id=p.id, amount=p.amount, method=p.method, status=p.status, reference=p.reference, paidAt=p.paid_at
                )
                for p in inv.payments
            ]

        return cls(
            id=inv.id,
            invoiceNumber=inv.invoice_number,
            customerId=inv.customer_id,
            jobId=inv.job_id,
            customer=customer,
            currency=inv.currency,
            subtotal=inv.subtotal or 0,
            taxRate=inv.tax_rate or 0,
            taxAmount=inv.tax_amount or 0,
            discountAmount=inv.discount_amount or 0,
            total=inv.total or 0,
            amountPaid=inv.amount_paid or 0,
            amountDue=inv.amount_due or 0,
            status=inv.status,
            issuedAt=inv.issued_at,
            dueAt=inv.due_at,
            paidAt=inv.paid_at,
            lastReminderAt=inv.last_reminder_at,
            notes=inv.notes,
            terms=inv.terms,
            footer=inv.footer,
            items=items,
            payments=payments,
            createdAt=inv.created_at,
        )
