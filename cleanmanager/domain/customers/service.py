"""Customer service - Business logic for customer operations"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_customer_status_email
from ...models import Customer, User
from ...security_utils import sanitize_text
from ...shared.validators import UK_PHONE_ERROR, format_uk_phone, is_valid_email, is_valid_uk_phone
from ..event_log.service import log_event
from .repository import CustomerRepository
from .schemas import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)

CUSTOMER_STATUSES = ("active", "inactive")

# request field -> column
FIELD_MAP = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "alternatePhone": "alternate_phone",
    "address": "address",
    "addressLine2": "address_line2",
    "city": "city",
    "postcode": "postcode",
    "country": "country",
    "customerType": "customer_type",
    "accessInstructions": "access_instructions",
    "parkingInstructions": "parking_instructions",
    "specialInstructions": "special_instructions",
    "preferredContactMethod": "preferred_contact_method",
    "notes": "notes",
}

REQUIRED_FIELDS = ("first_name", "last_name", "email", "phone", "address", "city", "postcode", "country")


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def get_customers(
        self,
        user: User,
        search: Optional[str] = None,
        customer_type: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Customer]:
        return self.repo.get_customers(self.db, user.company_id, search, customer_type, status)

    def get_customer(self, customer_id: int, user: User) -> Customer:
        customer = self.repo.get_customer_by_id(self.db, customer_id, user.company_id)
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")
        return customer

    def _clean_values(self, data: CustomerCreate, only_set: bool) -> dict:
        values = {}
        for field, column in FIELD_MAP.items():
            if only_set and field not in data.model_fields_set:
                continue
            value = getattr(data, field)
            if isinstance(value, str):
                value = value.strip()
                if column in ("notes", "access_instructions", "parking_instructions", "special_instructions"):
                    value = sanitize_text(value, 2000)
            values[column] = value
        return values

    def _validate(self, values: dict, company_id: int, exclude_id: Optional[int] = None) -> dict:
        """Shared create/update checks; returns values with email and phones normalised"""
        if not values.get("first_name") or not values.get("last_name") or not values.get("email"):
            raise HTTPException(status_code=400, detail="First name, last name, and email are required")
        if not values.get("phone"):
            raise HTTPException(status_code=400, detail="Phone number is required")
        if not all(values.get(f) for f in ("address", "city", "postcode", "country")):
            raise HTTPException(status_code=400, detail="Address, city, postcode, and country are required")

        values["email"] = values["email"].lower()
        if not is_valid_email(values["email"]):
            raise HTTPException(status_code=400, detail="Invalid email format")

        if not is_valid_uk_phone(values["phone"]):
            raise HTTPException(status_code=400, detail=UK_PHONE_ERROR)
        values["phone"] = format_uk_phone(values["phone"])

        if values.get("alternate_phone"):
            if not is_valid_uk_phone(values["alternate_phone"]):
                raise HTTPException(status_code=400, detail=f"Alternate phone: {UK_PHONE_ERROR}")
            values["alternate_phone"] = format_uk_phone(values["alternate_phone"])

        duplicate = self.repo.find_duplicate(
            self.db, company_id, values["email"], values["phone"], exclude_id=exclude_id
        )
        if duplicate:
            field, _ = duplicate
            if field == "email":
                raise HTTPException(status_code=409, detail="A customer with this email already exists")
            raise HTTPException(status_code=409, detail="A customer with this phone number already exists")
        return values

    def create_customer(self, data: CustomerCreate, user: User) -> Customer:
        logger.info(f"📥 Creating customer for company_id: {user.company_id}")
        values = self._validate(self._clean_values(data, only_set=False), user.company_id)
        values["customer_type"] = values.get("customer_type") or "residential"
        values["status"] = "active"

        customer = self.repo.create_customer(self.db, user.company_id, **values)
        log_event(
            self.db,
            user.company_id,
            "customer_created",
            entity_type="customer",
            entity_id=customer.id,
            description=f"Customer {customer.full_name} created",
            user_id=user.id,
        )
        self.db.commit()
        logger.info(f"✅ Customer {customer.id} created")
        return customer

    async def update_customer(self, customer_id: int, data: CustomerUpdate, user: User) -> Customer:
        customer = self.get_customer(customer_id, user)

        updates = self._clean_values(data, only_set=True)
        merged = {column: getattr(customer, column) for column in REQUIRED_FIELDS}
        merged["alternate_phone"] = customer.alternate_phone
        merged.update(updates)
        validated = self._validate(merged, user.company_id, exclude_id=customer.id)
        for column in ("email", "phone", "alternate_phone"):
            if column in updates:
                updates[column] = validated[column]

        previous_status = customer.status
        if "status" in data.model_fields_set and data.status is not None:
            if data.status not in CUSTOMER_STATUSES:
                raise HTTPException(status_code=400, detail="Status must be 'active' or 'inactive'")
            updates["status"] = data.status

        customer = self.repo.update_customer(self.db, customer, **updates)
        if customer.status != previous_status:
            await self._notify_status_change(customer, user)
        return customer

    async def update_status(self, customer_id: int, status: Optional[str], user: User) -> Customer:
        if status not in CUSTOMER_STATUSES:
            raise HTTPException(status_code=400, detail="Status must be 'active' or 'inactive'")

        customer = self.get_customer(customer_id, user)
        if customer.status == status:
            return customer

        customer = self.repo.update_customer(self.db, customer, status=status)
        log_event(
            self.db,
            user.company_id,
            "customer_reactivated" if status == "active" else "customer_deactivated",
            entity_type="customer",
            entity_id=customer.id,
            user_id=user.id,
        )
        self.db.commit()
        await self._notify_status_change(customer, user)
        return customer

    async def deactivate_customer(self, customer_id: int, user: User) -> dict:
        """Customers are never hard-deleted; DELETE only deactivates"""
        customer = self.get_customer(customer_id, user)
        if customer.status == "inactive":
            return {"message": "Customer already inactive", "id": customer.id}

        await self.update_status(customer_id, "inactive", user)
        logger.info(f"✅ Customer {customer.id} deactivated")
        return {"message": "Customer deactivated", "id": customer.id}

    async def _notify_status_change(self, customer: Customer, user: User) -> None:
        try:
            await send_customer_status_email(
                to=customer.email,
                customer_name=customer.first_name,
                company_name=user.company.name,
                is_active=customer.status == "active",
            )
            logger.info(f"📧 Status email sent to customer {customer.id}")
        except Exception as e:
            logger.error(f"❌ Failed to send customer status email: {e}")
