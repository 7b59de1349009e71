"""Company schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email


class CompanyProfileUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    businessType: Optional[str] = None
    paymentInstructions: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class CompanyProfileResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    businessType: Optional[str] = None
    subscriptionPlan: Optional[str] = None
    subscriptionStatus: Optional[str] = None
    maxEmployees: Optional[int] = None
    paymentInstructions: Optional[str] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, company) -> "CompanyProfileResponse":
        return cls(
            id=company.id,
            name=company.name,
            email=company.email,
            phone=company.phone,
            address=company.address,
            city=company.city,
            postcode=company.postcode,
            country=company.country,
            businessType=company.business_type,
            subscriptionPlan=company.subscription_plan,
            subscriptionStatus=company.subscription_status,
            maxEmployees=company.max_employees,
            paymentInstructions=company.payment_instructions,
            createdAt=company.created_at,
        )


class NotificationSettingsResponse(BaseModel):
    settings: dict[str, Any]
