"""Time-off service - employee requests and office review"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_time_off_status_email
from ...models import Employee, TimeOffRequest, User
from ...security_utils import sanitize_text
from ...utils.dates import count_weekdays, format_display_date, parse_datetime, utc_now
from ..event_log.service import log_event
from .repository import TimeOffRepository
from .schemas import TimeOffAction, TimeOffCreate

logger = logging.getLogger(__name__)

REVIEW_ACTIONS = {"approve": "approved", "deny": "denied"}


def _parse_day(value: str, label: str) -> date:
    try:
        parsed = parse_datetime(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return parsed.date()


def ranges_overlap(start: date, end: date, other_start: date, other_end: date) -> bool:
    return start <= other_end and end >= other_start


class TimeOffService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = TimeOffRepository()

    # ------------------------------------------------------------------
    # Employee side
    # ------------------------------------------------------------------

    def get_own_requests(self, employee: Employee, status: Optional[str] = None) -> list[TimeOffRequest]:
        return self.repo.get_requests(self.db, employee.company_id, status, employee.id)

    def create_request(self, data: TimeOffCreate, employee: Employee) -> TimeOffRequest:
        if not data.type or not data.startDate or not data.endDate:
            raise HTTPException(status_code=400, detail="Type, start date, and end date are required")

        start = _parse_day(data.startDate, "start date")
        end = _parse_day(data.endDate, "end date")
        if end < start:
            raise HTTPException(status_code=400, detail="End date must be after start date")

        for existing in self.repo.get_pending_for_employee(self.db, employee.id):
            if ranges_overlap(start, end, existing.start_date, existing.end_date):
                raise HTTPException(
                    status_code=400, detail="You already have a pending request for overlapping dates"
                )

        request = self.repo.save(
            self.db,
            TimeOffRequest(
                company_id=employee.company_id,
                employee_id=employee.id,
                type=sanitize_text(data.type, 50),
                start_date=start,
                end_date=end,
                total_days=count_weekdays(start, end),
                reason=sanitize_text(data.reason, 2000),
                status="pending",
            ),
        )
        logger.info(
            f"✅ Time-off request {request.id} created by employee {employee.id} ({request.total_days} days)"
        )
        return request

    def cancel_request(self, request_id: int, action: Optional[str], employee: Employee) -> TimeOffRequest:
        if action != "cancel":
            raise HTTPException(status_code=400, detail="Invalid action")
        request = self.repo.get_request(self.db, request_id, employee.company_id, employee.id)
        if not request:
            raise HTTPException(status_code=404, detail="Request not found")
        if request.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending requests can be cancelled")
        request.status = "cancelled"
        return self.repo.save(self.db, request)

    # ------------------------------------------------------------------
    # Office side
    # ------------------------------------------------------------------

    def get_requests(
        self, user: User, status: Optional[str] = None, employee_id: Optional[int] = None
    ) -> list[TimeOffRequest]:
        return self.repo.get_requests(self.db, user.company_id, status, employee_id)

    def get_request(self, request_id: int, user: User) -> TimeOffRequest:
        request = self.repo.get_request(self.db, request_id, user.company_id)
        if not request:
            raise HTTPException(status_code=404, detail="Time-off request not found")
        return request

    async def review_request(self, request_id: int, data: TimeOffAction, user: User) -> TimeOffRequest:
        request = self.get_request(request_id, user)
        if data.action not in REVIEW_ACTIONS:
            raise HTTPException(status_code=400, detail="Invalid action. Must be 'approve' or 'deny'")
        if request.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending requests can be reviewed")

        request.status = REVIEW_ACTIONS[data.action]
        request.reviewed_by = user.id
        request.reviewed_at = utc_now()
        request.review_notes = sanitize_text(data.reviewNotes, 2000)
        log_event(
            self.db,
            user.company_id,
            f"time_off_{request.status}",
            entity_type="time_off_request",
            entity_id=request.id,
            user_id=user.id,
            employee_id=request.employee_id,
        )
        request = self.repo.save(self.db, request)
        logger.info(f"✅ Time-off request {request.id} {request.status} by user {user.id}")

        employee = request.employee
        if employee and employee.email:
            try:
                await send_time_off_status_email(
                    to=employee.email,
                    employee_name=employee.first_name,
                    company_name=user.company.name,
                    status=request.status,
                    start_date=format_display_date(request.start_date),
                    end_date=format_display_date(request.end_date),
                    review_notes=request.review_notes,
                )
            except Exception as e:
                logger.error(f"❌ Failed to send time-off status email to {employee.email}: {e}")
        return request

    def delete_request(self, request_id: int, user: User) -> dict:
        request = self.get_request(request_id, user)
        self.repo.delete(self.db, request)
        logger.info(f"🗑️ Time-off request {request_id} deleted")
        return {"success": True, "message": "Request deleted successfully"}
