"""Time-off router - employee requests and office review"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_employee, get_current_user
from ...database import get_db
from ...models import Employee, User
from .schemas import TimeOffAction, TimeOffCreate, TimeOffResponse
from .service import TimeOffService

router = APIRouter(tags=["Time Off"])


def get_time_off_service(db: Session = Depends(get_db)) -> TimeOffService:
    return TimeOffService(db)


@router.get("/employee/time-off", response_model=list[TimeOffResponse])
async def get_my_time_off(
    status: Optional[str] = Query(None),
    employee: Employee = Depends(get_current_employee),
    service: TimeOffService = Depends(get_time_off_service),
):
    return [TimeOffResponse.from_model(r) for r in service.get_own_requests(employee, status)]


@router.post("/employee/time-off", response_model=TimeOffResponse, status_code=status.HTTP_201_CREATED)
async def create_time_off(
    data: TimeOffCreate,
    employee: Employee = Depends(get_current_employee),
    service: TimeOffService = Depends(get_time_off_service),
):
    return TimeOffResponse.from_model(service.create_request(data, employee))


@router.patch("/employee/time-off/{request_id}", response_model=TimeOffResponse)
async def cancel_time_off(
    request_id: int,
    data: TimeOffAction,
    employee: Employee = Depends(get_current_employee),
    service: TimeOffService = Depends(get_time_off_service),
):
    return TimeOffResponse.from_model(service.cancel_request(request_id, data.action, employee))


@router.get("/time-off", response_model=list[TimeOffResponse])
async def get_time_off_requests(
    status: Optional[str] = Query(None),
    employeeId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: TimeOffService = Depends(get_time_off_service),
):
    return [TimeOffResponse.from_model(r) for r in service.get_requests(current_user, status, employeeId)]


@router.get("/time-off/{request_id}", response_model=TimeOffResponse)
async def get_time_off_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: TimeOffService = Depends(get_time_off_service),
):
    return TimeOffResponse.from_model(service.get_request(request_id, current_user))


@router.patch("/time-off/{request_id}", response_model=TimeOffResponse)
async def review_time_off(
    request_id: int,
    data: TimeOffAction,
    current_user: User = Depends(get_current_user),
    service: TimeOffService = Depends(get_time_off_service),
):
    return TimeOffResponse.from_model(await service.review_request(request_id, data, current_user))


@router.delete("/time-off/{request_id}")
async def delete_time_off(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: TimeOffService = Depends(get_time_off_service),
):
    return service.delete_request(request_id, current_user)
