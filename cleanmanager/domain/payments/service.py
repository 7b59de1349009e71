"""Payment service - records payments and keeps invoice balances in step"""

import logging
import math
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import DEFAULT_CURRENCY
from ...email_service import send_payment_receipt_email
from ...models import User
from ...models_invoice import Invoice, Payment
from ...security_utils import sanitize_text
from ...utils.dates import utc_now
from ..event_log.service import log_event
from ..invoices.calculations import apply_payment_totals, money
from .repository import PaymentRepository
from .schemas import PaymentCreate

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = PaymentRepository()

    def get_payments(
        self, user: User, invoice_id: Optional[int] = None, customer_id: Optional[int] = None
    ) -> list[Payment]:
        return self.repo.get_payments(self.db, user.company_id, invoice_id, customer_id)

    def get_payment(self, payment_id: int, user: User) -> Payment:
        payment = self.repo.get_payment_by_id(self.db, payment_id, user.company_id)
        if not payment:
            raise HTTPException(status_code=404, detail="Payment not found")
        return payment

    def _recalculate(self, invoice: Invoice) -> None:
        self.db.flush()
        apply_payment_totals(invoice, self.repo.sum_payments(self.db, invoice.id), utc_now())

    async def create_payment(self, data: PaymentCreate, user: User) -> Payment:
        if not data.invoiceId:
            raise HTTPException(status_code=400, detail="Invoice is required")
        invoice = self.repo.get_invoice(self.db, data.invoiceId, user.company_id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        if data.amount is None or not math.isfinite(data.amount) or data.amount <= 0:
            raise HTTPException(status_code=400, detail="Payment amount must be greater than zero")

        logger.info(f"📥 Recording payment of {data.amount} against invoice {invoice.id}")
        try:
            payment = Payment(
                company_id=user.company_id,
                invoice_id=invoice.id,
                customer_id=invoice.customer_id,
                amount=money(data.amount),
                currency=invoice.currency or DEFAULT_CURRENCY,
                method=data.method or "cash",
                status="completed",
                transaction_id=data.transactionId,
                reference=sanitize_text(data.reference, 255),
                notes=sanitize_text(data.notes, 2000),
                paid_at=data.paidAt or utc_now(),
            )
            self.db.add(payment)
            self._recalculate(invoice)
            log_event(
                self.db,
                user.company_id,
                "payment_recorded",
                entity_type="invoice",
                entity_id=invoice.id,
                description=f"Payment of {payment.amount:.2f} recorded for {invoice.invoice_number}",
                user_id=user.id,
                meta={"paymentAmount": payment.amount, "amountDue": invoice.amount_due},
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record payment: {e}")
            raise HTTPException(status_code=500, detail="Failed to record payment")

        self.db.refresh(payment)
        logger.info(f"✅ Payment {payment.id} recorded, invoice {invoice.id} is {invoice.status}")

        customer = invoice.customer
        if customer and customer.email:
            try:
                await send_payment_receipt_email(
                    to=customer.email,
                    customer_name=customer.first_name,
                    company_name=user.company.name,
                    invoice_number=invoice.invoice_number,
                    amount=payment.amount,
                    amount_due=invoice.amount_due or 0,
                    currency=invoice.currency or DEFAULT_CURRENCY,
                )
            except Exception as e:
                logger.error(f"❌ Failed to send payment receipt: {e}")
        return payment

    def delete_payment(self, payment_id: int, user: User) -> dict:
        payment = self.get_payment(payment_id, user)
        invoice = payment.invoice
        try:
            self.db.delete(payment)
            self._recalculate(invoice)
            log_event(
                self.db,
                user.company_id,
                "payment_deleted",
                entity_type="invoice",
                entity_id=invoice.id,
                user_id=user.id,
                meta={"paymentId": payment_id},
            )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete payment {payment_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to delete payment")

        logger.info(f"🗑️ Payment {payment_id} deleted, invoice {invoice.id} due {invoice.amount_due}")
        return {
            "message": "Payment deleted",
            "id": payment_id,
            "invoiceId": invoice.id,
            "invoiceStatus": invoice.status,
            "amountDue": invoice.amount_due,
        }
