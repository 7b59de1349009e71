"""Check-in router - employee GPS check-in / check-out and the office log"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ...auth import get_current_employee, get_current_user
from ...database import get_db
from ...models import Employee, User
from .schemas import CheckInRequest, CheckInResponse, CheckInResult, CheckInStatusResponse
from .service import CheckInService

router = APIRouter(tags=["Check-ins"])


def get_check_in_service(db: Session = Depends(get_db)) -> CheckInService:
    return CheckInService(db)


@router.post("/employee/jobs/{job_id}/check-in", response_model=CheckInResult)
async def record_check_in(
    job_id: int,
    data: CheckInRequest,
    request: Request,
    employee: Employee = Depends(get_current_employee),
    service: CheckInService = Depends(get_check_in_service),
):
    check_in, job, job_completed, invoice = await service.record(
        job_id, data, employee, request.headers.get("user-agent")
    )
    if check_in.type == "check_in":
        message = "Checked in successfully"
    elif job_completed:
        message = "Checked out successfully. Job completed."
    else:
        message = "Checked out successfully"
    return CheckInResult(
        message=message,
        checkIn=CheckInResponse.from_model(check_in),
        jobStatus=job.status,
        jobCompleted=job_completed,
        invoiceId=invoice.id if invoice else None,
    )


@router.get("/employee/jobs/{job_id}/check-in", response_model=CheckInStatusResponse)
async def get_check_in_status(
    job_id: int,
    employee: Employee = Depends(get_current_employee),
    service: CheckInService = Depends(get_check_in_service),
):
    summary, check_ins = service.get_status(job_id, employee)
    return CheckInStatusResponse(
        status=summary["status"],
        lastCheckIn=CheckInResponse.from_model(summary["lastCheckIn"]) if summary["lastCheckIn"] else None,
        lastCheckOut=CheckInResponse.from_model(summary["lastCheckOut"]) if summary["lastCheckOut"] else None,
        totalTimeOnSite=summary["totalTimeOnSite"],
        checkIns=[CheckInResponse.from_model(c) for c in check_ins],
        hasCheckedIn=summary["hasCheckedIn"],
        hasCheckedOut=summary["hasCheckedOut"],
        jobDuration=summary["jobDuration"],
    )


@router.get("/check-ins", response_model=list[CheckInResponse])
async def get_check_ins(
    jobId: Optional[int] = Query(None),
    employeeId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: CheckInService = Depends(get_check_in_service),
):
    return [CheckInResponse.from_model(c) for c in service.get_check_ins(current_user, jobId, employeeId)]
