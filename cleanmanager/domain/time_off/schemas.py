"""Time-off schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

from ...models import TimeOffRequest


class TimeOffCreate(BaseModel):
    type: Optional[str] = None
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    reason: Optional[str] = None


class TimeOffAction(BaseModel):
    action: Optional[str] = None
    reviewNotes: Optional[str] = None


class TimeOffResponse(BaseModel):
    id: int
    employeeId: int
    employeeName: Optional[str] = None
    type: str
    startDate: date
    endDate: date
    totalDays: int = 0
    reason: Optional[str] = None
    status: str
    reviewedBy: Optional[int] = None
    reviewedAt: Optional[datetime] = None
    reviewNotes: Optional[str] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, request: TimeOffRequest) -> "TimeOffResponse":
        return cls(
            id=request.id,
            employeeId=request.employee_id,
            employeeName=request.employee.full_name if request.employee else None,
            type=request.type,
            startDate=request.start_date,
            endDate=request.end_date,
            totalDays=request.total_days or 0,
            reason=request.reason,
            status=request.status,
            reviewedBy=request.reviewed_by,
            reviewedAt=request.reviewed_at,
            reviewNotes=request.review_notes,
            createdAt=request.created_at,
        )
