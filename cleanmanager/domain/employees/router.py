"""Employee router - staff management endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from .schemas import EmployeeCreate, EmployeeCreatedResponse, EmployeeResponse, EmployeeUpdate
from .service import EmployeeService

router = APIRouter(prefix="/employees", tags=["Employees"])


def get_employee_service(db: Session = Depends(get_db)) -> EmployeeService:
    return EmployeeService(db)


@router.get("", response_model=list[EmployeeResponse])
async def get_employees(
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return [EmployeeResponse.from_model(e) for e in service.get_employees(current_user, status)]


@router.post("", response_model=EmployeeCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    data: EmployeeCreate,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    """Create an employee; the generated password is returned once as plainPassword"""
    employee, plain_password = service.create_employee(data, current_user)
    return EmployeeCreatedResponse(
        **EmployeeResponse.from_model(employee).model_dump(), plainPassword=plain_password
    )


@router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: int,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return EmployeeResponse.from_model(service.get_employee(employee_id, current_user))


@router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: int,
    data: EmployeeUpdate,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return EmployeeResponse.from_model(service.update_employee(employee_id, data, current_user))


@router.delete("/{employee_id}")
async def delete_employee(
    employee_id: int,
    current_user: User = Depends(require_admin),
    service: EmployeeService = Depends(get_employee_service),
):
    return service.delete_employee(employee_id, current_user)


@router.post("/{employee_id}/send-credentials")
async def send_credentials(
    employee_id: int,
    current_user: User = Depends(get_current_user),
    service: EmployeeService = Depends(get_employee_service),
):
    return await service.send_credentials(employee_id, current_user)
