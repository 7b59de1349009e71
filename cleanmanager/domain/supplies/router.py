"""Supplies router - stock items, office review of requests, employee requests"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_employee, get_current_user
from ...database import get_db
from ...models import Employee, User
from .schemas import (
    SupplyCreate,
    SupplyRequestAction,
    SupplyRequestCreate,
    SupplyRequestListResponse,
    SupplyRequestResponse,
    SupplyResponse,
    SupplyUpdate,
)
from .service import SupplyRequestService, SupplyService

router = APIRouter(tags=["Supplies"])


def get_supply_service(db: Session = Depends(get_db)) -> SupplyService:
    return SupplyService(db)


def get_supply_request_service(db: Session = Depends(get_db)) -> SupplyRequestService:
    return SupplyRequestService(db)


# ============================================================================
# SUPPLIES
# ============================================================================


@router.get("/supplies", response_model=list[SupplyResponse])
async def get_supplies(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: SupplyService = Depends(get_supply_service),
):
    return [SupplyResponse.from_model(s) for s in service.get_supplies(current_user, search, category, status)]


@router.post("/supplies", response_model=SupplyResponse, status_code=status.HTTP_201_CREATED)
async def create_supply(
    data: SupplyCreate,
    current_user: User = Depends(get_current_user),
    service: SupplyService = Depends(get_supply_service),
):
    return SupplyResponse.from_model(service.create_supply(data, current_user))


@router.get("/supplies/{supply_id}", response_model=SupplyResponse)
async def get_supply(
    supply_id: int,
    current_user: User = Depends(get_current_user),
    service: SupplyService = Depends(get_supply_service),
):
    return SupplyResponse.from_model(service.get_supply(supply_id, current_user))


@router.put("/supplies/{supply_id}", response_model=SupplyResponse)
async def update_supply(
    supply_id: int,
    data: SupplyUpdate,
    current_user: User = Depends(get_current_user),
    service: SupplyService = Depends(get_supply_service),
):
    return SupplyResponse.from_model(service.update_supply(supply_id, data, current_user))


@router.delete("/supplies/{supply_id}")
async def delete_supply(
    supply_id: int,
    current_user: User = Depends(get_current_user),
    service: SupplyService = Depends(get_supply_service),
):
    return service.delete_supply(supply_id, current_user)


# ============================================================================
# SUPPLY REQUESTS (OFFICE)
# ============================================================================


@router.get("/supply-requests", response_model=SupplyRequestListResponse)
async def get_supply_requests(
    status: Optional[str] = Query(None),
    urgency: Optional[str] = Query(None),
    employeeId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: SupplyRequestService = Depends(get_supply_request_service),
):
    requests, summary = service.get_requests(current_user, status, urgency, employeeId)
    return SupplyRequestListResponse(
        requests=[SupplyRequestResponse.from_model(r) for r in requests], summary=summary
    )


@router.get("/supply-requests/{request_id}", response_model=SupplyRequestResponse)
async def get_supply_request(
    request_id: int,
    current_user: User = Depends(get_current_user),
    service: SupplyRequestService = Depends(get_supply_request_service),
):
    return SupplyRequestResponse.from_model(service.get_request(request_id, current_user))


@router.patch("/supply-requests/{request_id}", response_model=SupplyRequestResponse)
async def review_supply_request(
    request_id: int,
    data: SupplyRequestAction,
    current_user: User = Depends(get_current_user),
    service: SupplyRequestService = Depends(get_supply_request_service),
):
    return SupplyRequestResponse.from_model(await service.review_request(request_id, data, current_user))


# ============================================================================
# SUPPLY REQUESTS (EMPLOYEE)
# ============================================================================


@router.get("/employee/supply-requests", response_model=SupplyRequestListResponse)
async def get_my_supply_requests(
    status: Optional[str] = Query(None),
    employee: Employee = Depends(get_current_employee),
    service: SupplyRequestService = Depends(get_supply_request_service),
):
    requests, summary = service.get_own_requests(employee, status)
    return SupplyRequestListResponse(
        requests=[SupplyRequestResponse.from_model(r) for r in requests], summary=summary
    )


@router.post(
    "/employee/supply-requests", response_model=SupplyRequestResponse, status_code=status.HTTP_201_CREATED
)
async def create_supply_request(
    data: SupplyRequestCreate,
    employee: Employee = Depends(get_current_employee),
    service: SupplyRequestService = Depends(get_supply_request_service),
):
    return SupplyRequestResponse.from_model(await service.create_request(data, employee))


@router.patch("/employee/supply-requests/{request_id}", response_model=SupplyRequestResponse)
async def cancel_supply_request(
    request_id: int,
    data: SupplyRequestAction,
    employee: Employee = Depends(get_current_employee),
    service: SupplyRequestService = Depends(get_supply_request_service),
):
    return SupplyRequestResponse.from_model(service.cancel_request(request_id, data.action, employee))
