"""Payment domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PaymentCreate(BaseModel):
    invoiceId: Optional[int] = None
    amount: Optional[float] = None
    method: Optional[str] = "cash"
    transactionId: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    paidAt: Optional[datetime] = None


class PaymentResponse(BaseModel):
    id: int
    invoiceId: int
    invoiceNumber: Optional[str] = None
    customerId: Optional[int] = None
    amount: float
    currency: Optional[str] = None
    method: Optional[str] = None
    status: Optional[str] = None
    transactionId: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    paidAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, p) -> "PaymentResponse":
        return cls(
            id=p.id,
            invoiceId=p.invoice_id,
            invoiceNumber=p.invoice.invoice_number if p.invoice else None,
            customerId=p.customer_id,
            amount=p.amount,
            currency=p.currency,
            method=p.method,
            status=p.status,
            transactionId=p.transaction_id,
            reference=p.reference,
            notes=p.notes,
            paidAt=p.paid_at,
            createdAt=p.created_at,
        )
