"""Booking request service - office review of portal bookings"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import BookingRequest, Job, User
from ...security_utils import sanitize_text
from ...utils.dates import utc_now
from ..event_log.service import log_event
from ..jobs.repository import JobRepository
from ..jobs.schemas import JobCreate
from ..jobs.service import JobService
from .repository import BookingRequestRepository
from .schemas import BookingConvert, BookingDecline

logger = logging.getLogger(__name__)

BOOKING_STATUSES = ("pending", "converted", "declined")


class BookingRequestService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRequestRepository()

    def get_bookings(self, user: User, status: Optional[str] = None, limit: int = 50) -> list[BookingRequest]:
        if status and status != "all" and status not in BOOKING_STATUSES:
            raise HTTPException(status_code=400, detail="Invalid status")
        return self.repo.get_bookings(self.db, user.company_id, status, limit)

    def get_booking(self, booking_id: int, user: User) -> BookingRequest:
        booking = self.repo.get_booking(self.db, booking_id, user.company_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking request not found")
        return booking

    def decline(self, booking_id: int, data: BookingDecline, user: User) -> BookingRequest:
        booking = self.get_booking(booking_id, user)
        if data.action != "decline":
            raise HTTPException(status_code=400, detail="Invalid action. Must be 'decline'")
        if booking.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending booking requests can be declined")

        booking.status = "declined"
        booking.admin_notes = sanitize_text(data.reason, 2000)
        booking.reviewed_by = user.id
        booking.reviewed_at = utc_now()
        log_event(
            self.db,
            user.company_id,
            "booking_declined",
            entity_type="booking_request",
            entity_id=booking.id,
            user_id=user.id,
            meta={"customerId": booking.customer_id},
        )
        booking = self.repo.save(self.db, booking)
        logger.info(f"✅ Booking request {booking.id} declined by user {user.id}")
        return booking

    def _job_location(self, booking: BookingRequest) -> dict:
        """
        Structured customer address when the booking used it, otherwise the
        free-text address the customer typed as the job location.
        """
        customer = booking.customer
        customer_address = ", ".join(
            part for part in (customer.address, customer.city, customer.postcode) if part
        )
        if booking.address and booking.address != customer_address:
            return {"location": booking.address}
        return {
            "location": customer.address,
            "addressLine2": customer.address_line2,
            "city": customer.city,
            "postcode": customer.postcode,
            "accessInstructions": customer.access_instructions,
            "parkingInstructions": customer.parking_instructions,
        }

    async def convert(self, booking_id: int, data: BookingConvert, user: User) -> tuple[BookingRequest, Job]:
        booking = self.get_booking(booking_id, user)
        if booking.status == "converted":
            raise HTTPException(status_code=400, detail="This booking request has already been converted to a job")
        if booking.status == "declined":
            raise HTTPException(status_code=400, detail="Declined booking requests cannot be converted")

        plan_id = data.planId or booking.plan_id
        if not plan_id:
            raise HTTPException(status_code=400, detail="Cleaning plan is required")
        plan = JobRepository.get_plan(self.db, plan_id, user.company_id)
        if not plan:
            raise HTTPException(status_code=404, detail="Cleaning plan not found")

        scheduled_for = data.scheduledFor
        if not scheduled_for and booking.preferred_date:
            scheduled_for = booking.preferred_date.isoformat()

        job_data = JobCreate(
            title=(data.title or "").strip() or plan.name,
            description=booking.notes,
            customerId=booking.customer_id,
            planId=plan.id,
            assignedEmployees=data.assignedEmployees,
            assignedTo=data.assignedTo,
            employeePay=data.employeePay,
            scheduledFor=scheduled_for,
            scheduledEnd=data.scheduledEnd,
            durationMinutes=data.durationMinutes,
            estimatedPrice=data.estimatedPrice if data.estimatedPrice is not None else plan.price,
            internalNotes=data.internalNotes or f"Converted from booking request #{booking.id}",
            **self._job_location(booking),
        )
        job = await JobService(self.db).create_job(job_data, user)

        booking.status = "converted"
        booking.converted_job_id = job.id
        booking.converted_at = utc_now()
        booking.reviewed_by = user.id
        booking.reviewed_at = booking.converted_at
        JobRepository.add_job_event(
            self.db,
            job.id,
            "booking_converted",
            f"Job created from booking request #{booking.id}",
            meta={"bookingRequestId": booking.id},
            actor_id=user.id,
        )
        log_event(
            self.db,
            user.company_id,
            "booking_converted",
            entity_type="booking_request",
            entity_id=booking.id,
            user_id=user.id,
            meta={"jobId": job.id, "customerId": booking.customer_id},
        )
        booking = self.repo.save(self.db, booking)
        logger.info(f"✅ Booking request {booking.id} converted to job {job.id}")
        return booking, job

    def delete_booking(self, booking_id: int, user: User) -> dict:
        booking = self.get_booking(booking_id, user)
        self.repo.delete(self.db, booking)
        logger.info(f"🗑️ Booking request {booking_id} deleted")
        return {"success": True, "message": "Booking request deleted successfully"}
