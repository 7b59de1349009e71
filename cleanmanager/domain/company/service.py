"""Company service - profile and notification preferences"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Company, User
from .repository import CompanyRepository
from .schemas import CompanyProfileUpdate

logger = logging.getLogger(__name__)

DEFAULT_NOTIFICATION_SETTINGS = {
    "jobUpdates": True,
    "employeeUpdates": True,
    "bookingUpdates": True,
    "quoteUpdates": True,
    "financeUpdates": True,
}


def normalize_notification_settings(raw: Any) -> dict[str, bool]:
    """Known keys only; anything that isn't a real boolean falls back to the default"""
    source = raw if isinstance(raw, dict) else {}
    return {
        key: source[key] if isinstance(source.get(key), bool) else default
        for key, default in DEFAULT_NOTIFICATION_SETTINGS.items()
    }


def notification_enabled(company: Optional[Company], key: str) -> bool:
    if company is None:
        return DEFAULT_NOTIFICATION_SETTINGS.get(key, True)
    return normalize_notification_settings(company.notification_settings).get(key, True)


def office_recipients(db: Session, company: Optional[Company], key: str) -> list[User]:
    """Admins to notify for a category, or nobody when the company turned it off"""
    if company is None or not notification_enabled(company, key):
        return []
    return CompanyRepository.get_admin_users(db, company.id)


class CompanyService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CompanyRepository()

    def get_company(self, user: User) -> Company:
        company = self.repo.get_company(self.db, user.company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        return company

    def update_profile(self, data: CompanyProfileUpdate, user: User) -> Company:
        company = self.get_company(user)

        if data.name is not None and not data.name.strip():
            raise HTTPException(status_code=400, detail="Company name cannot be empty")

        field_map = {
            "name": "name",
            "email": "email",
            "phone": "phone",
            "address": "address",
            "city": "city",
            "postcode": "postcode",
            "country": "country",
            "businessType": "business_type",
            "paymentInstructions": "payment_instructions",
        }
        updates = {
            column: getattr(data, field)
            for field, column in field_map.items()
            if field in data.model_fields_set
        }

        if updates.get("email") and updates["email"] != company.email:
            existing = (
                self.db.query(Company)
                .filter(Company.email == updates["email"], Company.id != company.id)
                .first()
            )
            if existing:
                raise HTTPException(status_code=409, detail="A company with this email already exists")

        logger.info(f"📥 Updating company {company.id} profile: {sorted(updates)}")
        return self.repo.update_company(self.db, company, **updates)

    def get_notification_settings(self, user: User) -> dict[str, bool]:
        return normalize_notification_settings(self.get_company(user).notification_settings)

    def update_notification_settings(self, payload: Any, user: User) -> dict[str, bool]:
        """Accepts {"settings": {...}} or the bare settings object"""
        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Invalid notification settings")
        raw = payload.get("settings") if isinstance(payload.get("settings"), dict) else payload

        company = self.get_company(user)
        settings = normalize_notification_settings(raw)
        self.repo.update_company(self.db, company, notification_settings=settings)
        logger.info(f"✅ Notification settings updated for company {company.id}")
        return settings
