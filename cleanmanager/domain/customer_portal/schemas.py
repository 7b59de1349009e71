"""Customer portal schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import BookingRequest, Job
from ...shared.validators import validate_email


class LoginCodeVerify(BaseModel):
    email: Optional[str] = None
    code: Optional[str] = None


class PortalCustomerSummary(BaseModel):
    id: int
    firstName: str
    lastName: str
    name: str
    email: str
    companyId: int
    companyName: Optional[str] = None


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    customer: PortalCustomerSummary


class PortalProfileUpdate(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    addressLine2: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    accessInstructions: Optional[str] = None
    parkingInstructions: Optional[str] = None
    specialInstructions: Optional[str] = None
    preferredContactMethod: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return validate_email(v) if v else v


class PortalTask(BaseModel):
    id: int
    title: str
    status: str


class PortalJobResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    status: str
    scheduledFor: Optional[datetime] = None
    scheduledEnd: Optional[datetime] = None
    completedAt: Optional[datetime] = None
    location: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    companyName: Optional[str] = None
    qualityRating: Optional[int] = None
    feedbackToken: Optional[str] = None
    tasks: list[PortalTask] = []

    @classmethod
    def from_model(cls, job: Job, company_name: Optional[str] = None) -> "PortalJobResponse":
        return cls(
            id=job.id,
            title=job.title,
            description=job.description,
            status=job.status,
            scheduledFor=job.scheduled_for,
            scheduledEnd=job.scheduled_end,
            completedAt=job.completed_at,
            location=job.location,
            city=job.city,
            postcode=job.postcode,
            companyName=company_name,
            qualityRating=job.quality_rating,
            feedbackToken=job.feedback_token if job.status == "completed" else None,
            tasks=[PortalTask(id=t.id, title=t.title, status=t.status) for t in job.tasks],
        )


class BookingCreate(BaseModel):
    planId: Optional[int] = None
    preferredDate: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class BookingResponse(BaseModel):
    id: int
    planId: Optional[int] = None
    planName: Optional[str] = None
    preferredDate: Optional[datetime] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    status: str
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, booking: BookingRequest) -> "BookingResponse":
        return cls(
            id=booking.id,
            planId=booking.plan_id,
            planName=booking.plan.name if booking.plan else None,
            preferredDate=booking.preferred_date,
            address=booking.address,
            notes=booking.notes,
            status=booking.status,
            createdAt=booking.created_at,
        )
