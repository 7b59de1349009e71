"""Shift swap router - office and employee endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_employee, get_current_user
from ...database import get_db
from ...models import Employee, User
from .schemas import ShiftSwapCreate, ShiftSwapDecision, ShiftSwapResponse, SwapOptionsResponse
from .service import ShiftSwapService

router = APIRouter(tags=["Shift Swaps"])


def get_shift_swap_service(db: Session = Depends(get_db)) -> ShiftSwapService:
    return ShiftSwapService(db)


@router.get("/shift-swaps", response_model=list[ShiftSwapResponse])
async def get_shift_swaps(
    status: Optional[str] = Query(None),
    employeeId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: ShiftSwapService = Depends(get_shift_swap_service),
):
    return [ShiftSwapResponse.from_model(s) for s in service.get_swaps(current_user.company_id, status, employeeId)]


@router.post("/shift-swaps", response_model=ShiftSwapResponse, status_code=status.HTTP_201_CREATED)
async def create_shift_swap(
    data: ShiftSwapCreate,
    current_user: User = Depends(get_current_user),
    service: ShiftSwapService = Depends(get_shift_swap_service),
):
    return ShiftSwapResponse.from_model(await service.create_swap(data, current_user.company))


@router.patch("/shift-swaps/{swap_id}", response_model=ShiftSwapResponse)
async def decide_shift_swap(
    swap_id: int,
    data: ShiftSwapDecision,
    current_user: User = Depends(get_current_user),
    service: ShiftSwapService = Depends(get_shift_swap_service),
):
    return ShiftSwapResponse.from_model(await service.decide(swap_id, data.status, current_user))


@router.get("/employee/shift-swaps", response_model=list[ShiftSwapResponse])
async def get_my_shift_swaps(
    employee: Employee = Depends(get_current_employee),
    service: ShiftSwapService = Depends(get_shift_swap_service),
):
    swaps = service.get_swaps(employee.company_id, employee_id=employee.id)
    return [ShiftSwapResponse.from_model(s) for s in swaps]


@router.get("/employee/shift-swaps/options", response_model=SwapOptionsResponse)
async def get_shift_swap_options(
    employee: Employee = Depends(get_current_employee),
    service: ShiftSwapService = Depends(get_shift_swap_service),
):
    return service.get_options(employee)


@router.post("/employee/shift-swaps", response_model=ShiftSwapResponse, status_code=status.HTTP_201_CREATED)
async def request_shift_swap(
    data: ShiftSwapCreate,
    employee: Employee = Depends(get_current_employee),
    service: ShiftSwapService = Depends(get_shift_swap_service),
):
    return ShiftSwapResponse.from_model(
        await service.create_swap(data, employee.company, requested_by=employee)
    )
