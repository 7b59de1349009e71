"""Equipment router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import EquipmentCreate, EquipmentResponse, EquipmentUpdate
from .service import EquipmentService

router = APIRouter(prefix="/equipment", tags=["Equipment"])


def get_equipment_service(db: Session = Depends(get_db)) -> EquipmentService:
    return EquipmentService(db)


@router.get("", response_model=list[EquipmentResponse])
async def get_equipment(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    assignedTo: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: EquipmentService = Depends(get_equipment_service),
):
    items = service.get_equipment(current_user, search, status, category, assignedTo)
    return [EquipmentResponse.from_model(e) for e in items]


@router.post("", response_model=EquipmentResponse, status_code=status.HTTP_201_CREATED)
async def create_equipment(
    data: EquipmentCreate,
    current_user: User = Depends(get_current_user),
    service: EquipmentService = Depends(get_equipment_service),
):
    return EquipmentResponse.from_model(service.create_item(data, current_user))


@router.get("/{equipment_id}", response_model=EquipmentResponse)
async def get_equipment_item(
    equipment_id: int,
    current_user: User = Depends(get_current_user),
    service: EquipmentService = Depends(get_equipment_service),
):
    return EquipmentResponse.from_model(service.get_item(equipment_id, current_user))


@router.put("/{equipment_id}", response_model=EquipmentResponse)
async def update_equipment(
    equipment_id: int,
    data: EquipmentUpdate,
    current_user: User = Depends(get_current_user),
    service: EquipmentService = Depends(get_equipment_service),
):
    return EquipmentResponse.from_model(service.update_item(equipment_id, data, current_user))


@router.delete("/{equipment_id}")
async def delete_equipment(
    equipment_id: int,
    current_user: User = Depends(get_current_user),
    service: EquipmentService = Depends(get_equipment_service),
):
    return service.delete_item(equipment_id, current_user)
