"""Shift swap schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from ...models import ShiftSwapRequest


class ShiftSwapCreate(BaseModel):
    fromJobId: Any = None
    toJobId: Any = None
    reason: Optional[str] = None


class ShiftSwapDecision(BaseModel):
    status: Optional[str] = None


class SwapJobSummary(BaseModel):
    id: int
    title: str
    scheduledFor: Optional[datetime] = None
    status: Optional[str] = None


class ShiftSwapResponse(BaseModel):
    id: int
    fromEmployeeId: int
    fromEmployeeName: Optional[str] = None
    toEmployeeId: int
    toEmployeeName: Optional[str] = None
    fromJob: Optional[SwapJobSummary] = None
    toJob: Optional[SwapJobSummary] = None
    requestedByEmployeeId: Optional[int] = None
    requestedByRole: str = "company"
    status: str
    reason: Optional[str] = None
    reviewedAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None

    @staticmethod
    def _job(job) -> Optional[SwapJobSummary]:
        if job is None:
            return None
        return SwapJobSummary(id=job.id, title=job.title, scheduledFor=job.scheduled_for, status=job.status)

    @classmethod
    def from_model(cls, swap: ShiftSwapRequest) -> "ShiftSwapResponse":
        return cls(
            id=swap.id,
            fromEmployeeId=swap.from_employee_id,
            fromEmployeeName=swap.from_employee.full_name if swap.from_employee else None,
            toEmployeeId=swap.to_employee_id,
            toEmployeeName=swap.to_employee.full_name if swap.to_employee else None,
            fromJob=cls._job(swap.from_job),
            toJob=cls._job(swap.to_job),
            requestedByEmployeeId=swap.requested_by_employee_id,
            requestedByRole=swap.requested_by_role or "company",
            status=swap.status,
            reason=swap.reason,
            reviewedAt=swap.reviewed_at,
            createdAt=swap.created_at,
        )


class SwapOptionEmployee(BaseModel):
    id: int
    firstName: str
    lastName: str
    name: str


class SwapOptionJob(BaseModel):
    id: int
    title: str
    scheduledFor: Optional[datetime] = None
    scheduledEnd: Optional[datetime] = None
    assignedTo: Optional[int] = None
    customerName: str
    assigneeName: str


class SwapOptionsResponse(BaseModel):
    employees: list[SwapOptionEmployee]
    jobs: list[SwapOptionJob]
