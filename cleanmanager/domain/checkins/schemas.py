"""Check-in schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...models import JobCheckIn


class CheckInRequest(BaseModel):
    type: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    address: Optional[str] = None
    deviceType: Optional[str] = None
    deviceModel: Optional[str] = None
    comment: Optional[str] = None


class CheckInResponse(BaseModel):
    id: int
    jobId: int
    employeeId: int
    employeeName: Optional[str] = None
    jobTitle: Optional[str] = None
    type: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    locationAccuracy: Optional[float] = None
    capturedAddress: Optional[str] = None
    distanceFromJobSite: Optional[float] = None
    isWithinRange: bool = False
    deviceType: Optional[str] = None
    deviceModel: Optional[str] = None
    checkedAt: Optional[datetime] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, check_in: JobCheckIn) -> "CheckInResponse":
        return cls(
            id=check_in.id,
            jobId=check_in.job_id,
            employeeId=check_in.employee_id,
            employeeName=check_in.employee.full_name if check_in.employee else None,
            jobTitle=check_in.job.title if check_in.job else None,
            type=check_in.type,
            latitude=check_in.latitude,
            longitude=check_in.longitude,
            locationAccuracy=check_in.location_accuracy,
            capturedAddress=check_in.captured_address,
            distanceFromJobSite=check_in.distance_from_job_site,
            isWithinRange=bool(check_in.is_within_range),
            deviceType=check_in.device_type,
            deviceModel=check_in.device_model,
            checkedAt=check_in.checked_at,
        )


class CheckInResult(BaseModel):
    success: bool = True
    message: str
    checkIn: CheckInResponse
    jobStatus: Optional[str] = None
    jobCompleted: bool = False
    invoiceId: Optional[int] = None


class CheckInStatusResponse(BaseModel):
    status: str
    lastCheckIn: Optional[CheckInResponse] = None
    lastCheckOut: Optional[CheckInResponse] = None
    totalTimeOnSite: int = 0
    checkIns: list[CheckInResponse] = []
    hasCheckedIn: bool = False
    hasCheckedOut: bool = False
    jobDuration: Optional[int] = None
