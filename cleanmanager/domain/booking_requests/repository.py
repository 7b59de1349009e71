"""Booking request repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import BookingRequest


class BookingRequestRepository:
    @staticmethod
    def get_bookings(
        db: Session, company_id: int, status: Optional[str] = None, limit: int = 50
    ) -> list[BookingRequest]:
        query = (
            db.query(BookingRequest)
            .options(joinedload(BookingRequest.customer), joinedload(BookingRequest.plan))
            .filter(BookingRequest.company_id == company_id)
        )
        if status and status != "all":
            query = query.filter(BookingRequest.status == status)
        return query.order_by(BookingRequest.created_at.desc(), BookingRequest.id.desc()).limit(limit).all()

    @staticmethod
    def get_booking(db: Session, booking_id: int, company_id: int) -> Optional[BookingRequest]:
        return (
            db.query(BookingRequest)
            .options(joinedload(BookingRequest.customer), joinedload(BookingRequest.plan))
            .filter(BookingRequest.id == booking_id, BookingRequest.company_id == company_id)
            .first()
        )

    @staticmethod
    def save(db: Session, booking: BookingRequest) -> BookingRequest:
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def delete(db: Session, booking: BookingRequest) -> None:
        db.delete(booking)
        db.commit()
