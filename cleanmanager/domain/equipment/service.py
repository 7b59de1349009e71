"""Equipment service"""

import logging
from datetime import date
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...models_inventory import Equipment
from ...utils.dates import parse_datetime
from .repository import EquipmentRepository
from .schemas import EquipmentCreate, EquipmentUpdate

logger = logging.getLogger(__name__)

EQUIPMENT_STATUSES = ("available", "in-use", "maintenance", "retired")

DATE_FIELDS = {
    "purchaseDate": "purchase_date",
    "warrantyExpires": "warranty_expires",
    "lastMaintenanceDate": "last_maintenance_date",
    "nextMaintenanceDate": "next_maintenance_date",
}
TEXT_FIELDS = {
    "name": "name",
    "category": "category",
    "serialNumber": "serial_number",
    "condition": "condition",
    "notes": "notes",
}


def _parse_date(value: Optional[str], label: str) -> Optional[date]:
    try:
        parsed = parse_datetime(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label}")
    return parsed.date() if parsed else None


class EquipmentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = EquipmentRepository()

    def get_equipment(
        self,
        user: User,
        search: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> list[Equipment]:
        return self.repo.get_equipment(self.db, user.company_id, search, status, category, assigned_to)

    def get_item(self, equipment_id: int, user: User) -> Equipment:
        equipment = self.repo.get_equipment_by_id(self.db, equipment_id, user.company_id)
        if not equipment:
            raise HTTPException(status_code=404, detail="Equipment not found")
        return equipment

    def _resolve_employee(self, value: Any, company_id: int) -> Optional[int]:
        if value in (None, ""):
            return None
        try:
            employee_id = int(value)
        except (TypeError, ValueError):
            raise HTTPException(status_code=400, detail="Invalid assigned employee")
        if not self.repo.employee_in_company(self.db, employee_id, company_id):
            raise HTTPException(
                status_code=400, detail="Assigned employee not found or does not belong to this company"
            )
        return employee_id

    def create_item(self, data: EquipmentCreate, user: User) -> Equipment:
        if not data.name or not data.name.strip():
            raise HTTPException(status_code=400, detail="Equipment name is required")
        if data.purchasePrice is not None and data.purchasePrice < 0:
            raise HTTPException(status_code=400, detail="Purchase price cannot be negative")

        values = {column: getattr(data, field) for field, column in TEXT_FIELDS.items()}
        values["name"] = data.name.strip()
        values.update(
            {column: _parse_date(getattr(data, field), field) for field, column in DATE_FIELDS.items()}
        )
        equipment = self.repo.create_equipment(
            self.db,
            company_id=user.company_id,
            status="available",
            assigned_to=self._resolve_employee(data.assignedTo, user.company_id),
            purchase_price=data.purchasePrice,
            **values,
        )
        logger.info(f"✅ Equipment {equipment.id} created for company {user.company_id}")
        return equipment

    def update_item(self, equipment_id: int, data: EquipmentUpdate, user: User) -> Equipment:
        equipment = self.get_item(equipment_id, user)
        fields = data.model_fields_set
        updates: dict[str, Any] = {}

        for field, column in TEXT_FIELDS.items():
            if field in fields:
                updates[column] = getattr(data, field)
        if "name" in fields:
            if not data.name or not data.name.strip():
                raise HTTPException(status_code=400, detail="Equipment name is required")
            updates["name"] = data.name.strip()
        for field, column in DATE_FIELDS.items():
            if field in fields:
                updates[column] = _parse_date(getattr(data, field), field)
        if "status" in fields:
            if data.status not in EQUIPMENT_STATUSES:
                raise HTTPException(status_code=400, detail="Invalid equipment status")
            updates["status"] = data.status
        if "purchasePrice" in fields:
            if data.purchasePrice is not None and data.purchasePrice < 0:
                raise HTTPException(status_code=400, detail="Purchase price cannot be negative")
            updates["purchase_price"] = data.purchasePrice
        if "assignedTo" in fields:
            updates["assigned_to"] = self._resolve_employee(data.assignedTo, user.company_id)

        return self.repo.update_equipment(self.db, equipment, **updates)

    def delete_item(self, equipment_id: int, user: User) -> dict:
        equipment = self.get_item(equipment_id, user)
        self.repo.delete_equipment(self.db, equipment)
        logger.info(f"🗑️ Equipment {equipment_id} deleted")
        return {"message": "Equipment deleted successfully", "id": equipment_id}
