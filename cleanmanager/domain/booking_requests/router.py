"""Booking request router - office side of customer portal bookings"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ..jobs.schemas import JobResponse
from .schemas import BookingConvert, BookingConvertResponse, BookingDecline, BookingRequestResponse
from .service import BookingRequestService

router = APIRouter(prefix="/booking-requests", tags=["Booking Requests"])


def get_booking_request_service(db: Session = Depends(get_db)) -> BookingRequestService:
    return BookingRequestService(db)


@router.get("", response_model=list[BookingRequestResponse])
async def get_booking_requests(
    status: Optional[str] = Query(None, description="pending | converted | declined | all"),
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    service: BookingRequestService = Depends(get_booking_request_service),
):
    return [BookingRequestResponse.from_model(b) for b in service.get_bookings(current_user, status, limit)]


@router.get("/{booking_id}", response_model=BookingRequestResponse)
async def get_booking_request(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingRequestService = Depends(get_booking_request_service),
):
    return BookingRequestResponse.from_model(service.get_booking(booking_id, current_user))


@router.patch("/{booking_id}", response_model=BookingRequestResponse)
async def decline_booking_request(
    booking_id: int,
    data: BookingDecline,
    current_user: User = Depends(get_current_user),
    service: BookingRequestService = Depends(get_booking_request_service),
):
    return BookingRequestResponse.from_model(service.decline(booking_id, data, current_user))


@router.post("/{booking_id}/convert", response_model=BookingConvertResponse)
async def convert_booking_request(
    booking_id: int,
    data: BookingConvert,
    current_user: User = Depends(get_current_user),
    service: BookingRequestService = Depends(get_booking_request_service),
):
    """Create a scheduled job from the booking and mark it converted"""
    booking, job = await service.convert(booking_id, data, current_user)
    return BookingConvertResponse(
        booking=BookingRequestResponse.from_model(booking),
        job=JobResponse.from_model(job, include_details=True),
    )


@router.delete("/{booking_id}")
async def delete_booking_request(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingRequestService = Depends(get_booking_request_service),
):
    return service.delete_booking(booking_id, current_user)
