"""Equipment schemas"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel

from ...models_inventory import Equipment


class EquipmentCreate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    serialNumber: Optional[str] = None
    condition: Optional[str] = None
    assignedTo: Any = None
    purchaseDate: Optional[str] = None
    purchasePrice: Optional[float] = None
    warrantyExpires: Optional[str] = None
    lastMaintenanceDate: Optional[str] = None
    nextMaintenanceDate: Optional[str] = None
    notes: Optional[str] = None


class EquipmentUpdate(EquipmentCreate):
    status: Optional[str] = None


class EquipmentResponse(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    serialNumber: Optional[str] = None
    status: str
    condition: Optional[str] = None
    assignedTo: Optional[int] = None
    assignedToName: Optional[str] = None
    purchaseDate: Optional[date] = None
    purchasePrice: Optional[float] = None
    warrantyExpires: Optional[date] = None
    lastMaintenanceDate: Optional[date] = None
    nextMaintenanceDate: Optional[date] = None
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, equipment: Equipment) -> "EquipmentResponse":
        employee = equipment.assigned_employee
        return cls(
            id=equipment.id,
            name=equipment.name,
            category=equipment.category,
            serialNumber=equipment.serial_number,
            status=equipment.status or "available",
            condition=equipment.condition,
            assignedTo=equipment.assigned_to,
            assignedToName=employee.full_name if employee else None,
            purchaseDate=equipment.purchase_date,
            purchasePrice=equipment.purchase_price,
            warrantyExpires=equipment.warranty_expires,
            lastMaintenanceDate=equipment.last_maintenance_date,
            nextMaintenanceDate=equipment.next_maintenance_date,
            notes=equipment.notes,
            createdAt=equipment.created_at,
            updatedAt=equipment.updated_at,
        )
