"""Cleaning plan router"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import CleaningPlanCreate, CleaningPlanResponse, CleaningPlanUpdate
from .service import CleaningPlanService

router = APIRouter(prefix="/cleaning-plans", tags=["Cleaning Plans"])


def get_cleaning_plan_service(db: Session = Depends(get_db)) -> CleaningPlanService:
    return CleaningPlanService(db)


@router.get("", response_model=list[CleaningPlanResponse])
async def get_plans(
    current_user: User = Depends(get_current_user),
    service: CleaningPlanService = Depends(get_cleaning_plan_service),
):
    return [CleaningPlanResponse.from_model(p) for p in service.get_plans(current_user)]


@router.post("", response_model=CleaningPlanResponse, status_code=status.HTTP_201_CREATED)
async def create_plan(
    data: CleaningPlanCreate,
    current_user: User = Depends(get_current_user),
    service: CleaningPlanService = Depends(get_cleaning_plan_service),
):
    return CleaningPlanResponse.from_model(service.create_plan(data, current_user))


@router.get("/{plan_id}", response_model=CleaningPlanResponse)
async def get_plan(
    plan_id: int,
    current_user: User = Depends(get_current_user),
    service: CleaningPlanService = Depends(get_cleaning_plan_service),
):
    return CleaningPlanResponse.from_model(service.get_plan(plan_id, current_user))


@router.patch("/{plan_id}", response_model=CleaningPlanResponse)
async def update_plan(
    plan_id: int,
    data: CleaningPlanUpdate,
    current_user: User = Depends(get_current_user),
    service: CleaningPlanService = Depends(get_cleaning_plan_service),
):
    return CleaningPlanResponse.from_model(service.update_plan(plan_id, data, current_user))


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: int,
    current_user: User = Depends(get_current_user),
    service: CleaningPlanService = Depends(get_cleaning_plan_service),
):
    return service.delete_plan(plan_id, current_user)
