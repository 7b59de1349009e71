"""Employee portal router - endpoints used with an employee token"""

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_employee
from ...database import get_db
from ...models import Employee
from ..employees.schemas import EmployeeResponse
from ..jobs.schemas import JobResponse, JobTaskResponse
from .schemas import DeclineJobRequest, JobResponseResult, PasswordChangeRequest, TaskStatusUpdate
from .service import EmployeePortalService

router = APIRouter(prefix="/employee", tags=["Employee Portal"])


def get_employee_portal_service(db: Session = Depends(get_db)) -> EmployeePortalService:
    return EmployeePortalService(db)


@router.get("/jobs", response_model=list[JobResponse])
async def get_my_jobs(
    status: Optional[str] = Query(None),
    employee: Employee = Depends(get_current_employee),
    service: EmployeePortalService = Depends(get_employee_portal_service),
):
    return [JobResponse.from_model(j, include_details=True) for j in service.get_jobs(employee, status)]


@router.get("/jobs/{job_id}", response_model=JobResponse)
async def get_my_job(
    job_id: int,
    employee: Employee = Depends(get_current_employee),
    service: EmployeePortalService = Depends(get_employee_portal_service),
):
    return JobResponse.from_model(service.get_job(job_id, employee), include_details=True)


@router.post("/jobs/{job_id}/accept", response_model=JobResponseResult)
async def accept_job(
    job_id: int,
    employee: Employee = Depends(get_current_employee),
    service: EmployeePortalService = Depends(get_employee_portal_service),
):
    job, all_accepted = await service.accept_job(job_id, employee)
    message = (
        "Job accepted successfully! Customer has been notified."
        if all_accepted
        else "Job accepted. Waiting for the rest of the team to confirm."
    )
    return JobResponseResult(
        success=True,
        message=message,
        awaitingOthers=not all_accepted,
        job=JobResponse.from_model(job, include_details=True),
    )


@router.delete("/jobs/{job_id}/accept", response_model=JobResponseResult)
async def decline_job(
    job_id: int,
    data: Optional[DeclineJobRequest] = Body(None),
    employee: Employee = Depends(get_current_employee),
    service: EmployeePortalService = Depends(get_employee_portal_service),
):
    job = await service.decline_job(job_id, employee, data.reason if data else None)
    return JobResponseResult(
        success=True,
        message="Job declined",
        job=JobResponse.from_model(job, include_details=True),
    )


@router.patch("/jobs/{job_id}/tasks/{task_id}", response_model=JobTaskResponse)
async def update_task(
    job_id: int,
    task_id: int,
    data: TaskStatusUpdate,
    employee: Employee = Depends(get_current_employee),
    service: EmployeePortalService = Depends(get_employee_portal_service),
):
    return JobTaskResponse.from_model(service.update_task(job_id, task_id, data.status, employee))


@router.get("/profile", response_model=EmployeeResponse)
async def get_profile(employee: Employee = Depends(get_current_employee)):
    return EmployeeResponse.from_model(employee)


@router.patch("/password")
async def change_password(
    data: PasswordChangeRequest,
    employee: Employee = Depends(get_current_employee),
    service: EmployeePortalService = Depends(get_employee_portal_service),
):
    return service.change_password(data, employee)
