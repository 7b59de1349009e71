"""Booking request schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from ...models import BookingRequest
from ..jobs.schemas import JobResponse


class BookingDecline(BaseModel):
    action: Optional[str] = None
    reason: Optional[str] = None


class BookingConvert(BaseModel):
    """Job details chosen by the office; anything left out comes from the booking"""

    title: Optional[str] = None
    planId: Optional[int] = None
    scheduledFor: Optional[str] = None
    scheduledEnd: Optional[str] = None
    durationMinutes: Optional[Any] = None
    assignedEmployees: Optional[list[Any]] = None
    assignedTo: Optional[Any] = None
    employeePay: Optional[Any] = None
    estimatedPrice: Optional[float] = None
    internalNotes: Optional[str] = None


class BookingRequestResponse(BaseModel):
    id: int
    customerId: int
    customerName: Optional[str] = None
    customerEmail: Optional[str] = None
    planId: Optional[int] = None
    planName: Optional[str] = None
    preferredDate: Optional[datetime] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    status: str
    adminNotes: Optional[str] = None
    reviewedBy: Optional[int] = None
    reviewedAt: Optional[datetime] = None
    convertedJobId: Optional[int] = None
    convertedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, booking: BookingRequest) -> "BookingRequestResponse":
        customer = booking.customer
        return cls(
            id=booking.id,
            customerId=booking.customer_id,
            customerName=customer.full_name if customer else None,
            customerEmail=customer.email if customer else None,
            planId=booking.plan_id,
            planName=booking.plan.name if booking.plan else None,
            preferredDate=booking.preferred_date,
            address=booking.address,
            notes=booking.notes,
            status=booking.status,
            adminNotes=booking.admin_notes,
            reviewedBy=booking.reviewed_by,
            reviewedAt=booking.reviewed_at,
            convertedJobId=booking.converted_job_id,
            convertedAt=booking.converted_at,
            createdAt=booking.created_at,
        )


class BookingConvertResponse(BaseModel):
    booking: BookingRequestResponse
    job: JobResponse
