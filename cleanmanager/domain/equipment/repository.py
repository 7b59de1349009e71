"""Equipment repository"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import Employee
from ...models_inventory import Equipment


class EquipmentRepository:
    @staticmethod
    def get_equipment(
        db: Session,
        company_id: int,
        search: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
        assigned_to: Optional[int] = None,
    ) -> list[Equipment]:
        query = (
            db.query(Equipment)
            .options(joinedload(Equipment.assigned_employee))
            .filter(Equipment.company_id == company_id)
        )
        if status:
            query = query.filter(Equipment.status == status)
        if category:
            query = query.filter(Equipment.category == category)
        if assigned_to:
            query = query.filter(Equipment.assigned_to == assigned_to)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(Equipment.name.ilike(term), Equipment.serial_number.ilike(term)))
        return query.order_by(Equipment.created_at.desc(), Equipment.id.desc()).all()

    @staticmethod
    def get_equipment_by_id(db: Session, equipment_id: int, company_id: int) -> Optional[Equipment]:
        return (
            db.query(Equipment)
            .options(joinedload(Equipment.assigned_employee))
            .filter(Equipment.id == equipment_id, Equipment.company_id == company_id)
            .first()
        )

    @staticmethod
    def employee_in_company(db: Session, employee_id: int, company_id: int) -> bool:
        return (
            db.query(Employee.id)
            .filter(Employee.id == employee_id, Employee.company_id == company_id)
            .first()
            is not None
        )

    @staticmethod
    def create_equipment(db: Session, **data) -> Equipment:
        equipment = Equipment(**data)
        db.add(equipment)
        db.commit()
        db.refresh(equipment)
        return equipment

    @staticmethod
    def update_equipment(db: Session, equipment: Equipment, **updates) -> Equipment:
        for key, value in updates.items():
            setattr(equipment, key, value)
        db.commit()
        db.refresh(equipment)
        return equipment

    @staticmethod
    def delete_equipment(db: Session, equipment: Equipment) -> None:
        db.delete(equipment)
        db.commit()
