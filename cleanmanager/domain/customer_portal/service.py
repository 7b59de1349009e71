"""Customer portal service - magic code login and the customer's own records"""

import logging
import time
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import create_customer_token
from ...cache import delete_login_code, get_login_code, store_login_code, update_login_code
from ...config import IS_PRODUCTION, LOGIN_CODE_EXPIRY_SECONDS, LOGIN_CODE_MAX_ATTEMPTS
from ...email_service import send_booking_request_email, send_portal_login_code_email
from ...models import BookingRequest, Customer
from ...security_utils import constant_time_equals, generate_login_code, sanitize_text
from ...shared.validators import validate_uk_phone
from ...utils.dates import format_display_datetime, parse_datetime, start_of_day, utc_now
from ..company.service import office_recipients
from ..event_log.service import log_event
from .repository import CustomerPortalRepository
from .schemas import BookingCreate, LoginCodeVerify, PortalProfileUpdate

logger = logging.getLogger(__name__)

GENERIC_CODE_MESSAGE = "If a customer account exists with this email, a login code has been sent."

PROFILE_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "address": "address",
    "addressLine2": "address_line2",
    "city": "city",
    "postcode": "postcode",
    "accessInstructions": "access_instructions",
    "parkingInstructions": "parking_instructions",
    "specialInstructions": "special_instructions",
    "preferredContactMethod": "preferred_contact_method",
}
REQUIRED_PROFILE_FIELDS = ("firstName", "lastName", "email")


class CustomerPortalService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerPortalRepository()

    # ------------------------------------------------------------------
    # Login code
    # ------------------------------------------------------------------

    async def request_code(self, email: Optional[str]) -> dict:
        if not email or not email.strip():
            raise HTTPException(status_code=400, detail="Email is required")

        response = {"message": GENERIC_CODE_MESSAGE}
        customer = self.repo.get_customer_by_email(self.db, email)
        if not customer:
            logger.info("ℹ️ Portal login code requested for an unknown email")
            return response

        code = generate_login_code()
        store_login_code(email, code, LOGIN_CODE_EXPIRY_SECONDS)
        try:
            await send_portal_login_code_email(
                to=customer.email,
                customer_name=customer.first_name,
                company_name=customer.company.name if customer.company else "",
                code=code,
            )
            logger.info(f"📧 Portal login code sent to customer {customer.id}")
        except Exception as e:
            logger.error(f"❌ Failed to send portal login code to customer {customer.id}: {e}")

        if not IS_PRODUCTION:
            response["devCode"] = code
        return response

    def verify_code(self, data: LoginCodeVerify) -> tuple[str, Customer]:
        if not data.email:
            raise HTTPException(status_code=400, detail="Email is required")
        if not data.code:
            raise HTTPException(status_code=400, detail="Verification code is required")

        stored = get_login_code(data.email)
        if not stored:
            raise HTTPException(status_code=400, detail="No login code found. Please request a new code.")
        if time.time() > stored.get("expiresAt", 0):
            delete_login_code(data.email)
            raise HTTPException(status_code=400, detail="Code has expired. Please request a new code.")
        if stored.get("attempts", 0) >= LOGIN_CODE_MAX_ATTEMPTS:
            delete_login_code(data.email)
            raise HTTPException(status_code=400, detail="Too many failed attempts. Please request a new code.")
        if not constant_time_equals(str(stored.get("code", "")), data.code.strip()):
            stored["attempts"] = stored.get("attempts", 0) + 1
            update_login_code(data.email, stored)
            raise HTTPException(status_code=400, detail="Invalid code. Please try again.")

        delete_login_code(data.email)
        customer = self.repo.get_customer_by_email(self.db, data.email)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")

        logger.info(f"✅ Customer {customer.id} signed in to the portal")
        return create_customer_token(customer), customer

    # ------------------------------------------------------------------
    # Customer records
    # ------------------------------------------------------------------

    def get_jobs(self, customer: Customer):
        return self.repo.get_jobs(self.db, customer)

    def get_invoices(self, customer: Customer):
        return self.repo.get_invoices(self.db, customer)

    def company_name(self, customer: Customer) -> Optional[str]:
        company = self.repo.get_company(self.db, customer.company_id)
        return company.name if company else None

    def update_profile(self, data: PortalProfileUpdate, customer: Customer) -> Customer:
        fields = data.model_fields_set
        for field in REQUIRED_PROFILE_FIELDS:
            if field in fields and not (getattr(data, field) or "").strip():
                raise HTTPException(status_code=400, detail=f"{field} cannot be empty")

        updates = {}
        for field, column in PROFILE_FIELDS.items():
            if field in fields:
                value = getattr(data, field)
                updates[column] = value.strip() if isinstance(value, str) else value
        if updates.get("email") and self.repo.email_taken(
            self.db, customer.company_id, updates["email"], customer.id
        ):
            raise HTTPException(status_code=409, detail="A customer with this email already exists")
        if updates.get("phone"):
            try:
                updates["phone"] = validate_uk_phone(updates["phone"])
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))

        for column, value in updates.items():
            setattr(customer, column, value)
        customer = self.repo.save(self.db, customer)
        logger.info(f"✅ Customer {customer.id} updated their profile: {sorted(updates)}")
        return customer

    def get_bookings(self, customer: Customer) -> list[BookingRequest]:
        return self.repo.get_bookings(self.db, customer)

    async def create_booking(self, data: BookingCreate, customer: Customer) -> BookingRequest:
        plan = None
        if data.planId:
            plan = self.repo.get_plan(self.db, data.planId, customer.company_id)
            if not plan:
                raise HTTPException(status_code=404, detail="Cleaning plan not found")

        try:
            preferred_date = parse_datetime(data.preferredDate)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid preferred date")
        if preferred_date and preferred_date < start_of_day(utc_now()):
            raise HTTPException(status_code=400, detail="Preferred date cannot be in the past")

        address = sanitize_text(data.address, 500) or ", ".join(
            part for part in (customer.address, customer.city, customer.postcode) if part
        )
        booking = self.repo.save(
            self.db,
            BookingRequest(
                company_id=customer.company_id,
                customer_id=customer.id,
                plan_id=plan.id if plan else None,
                preferred_date=preferred_date,
                address=address or None,
                notes=sanitize_text(data.notes, 2000),
                status="pending",
            ),
        )
        log_event(
            self.db,
            customer.company_id,
            "booking_requested",
            entity_type="booking_request",
            entity_id=booking.id,
            meta={"customerId": customer.id},
        )
        self.db.commit()
        logger.info(f"✅ Booking request {booking.id} created by customer {customer.id}")

        company = self.repo.get_company(self.db, customer.company_id)
        for admin in office_recipients(self.db, company, "bookingUpdates"):
            try:
                await send_booking_request_email(
                    to=admin.email,
                    recipient_name=admin.first_name,
                    company_name=company.name,
                    customer_name=customer.full_name,
                    plan_name=plan.name if plan else None,
                    preferred_date=format_display_datetime(preferred_date),
                    address=booking.address,
                    notes=booking.notes,
                )
            except Exception as e:
                logger.error(f"❌ Failed to send booking request email to {admin.email}: {e}")
        return booking
