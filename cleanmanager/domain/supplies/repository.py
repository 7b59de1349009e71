"""Supplies repository - stock items and employee supply requests"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models_inventory import Supply, SupplyRequest


class SupplyRepository:
    @staticmethod
    def get_supplies(
        db: Session,
        company_id: int,
        search: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[Supply]:
        query = db.query(Supply).filter(Supply.company_id == company_id)
        if category:
            query = query.filter(Supply.category == category)
        if status:
            query = query.filter(Supply.status == status)
        if search:
            term = f"%{search.strip()}%"
            query = query.filter(or_(Supply.name.ilike(term), Supply.sku.ilike(term)))
        return query.order_by(Supply.name.asc(), Supply.id.asc()).all()

    @staticmethod
    def get_supply(db: Session, supply_id: int, company_id: int) -> Optional[Supply]:
        return db.query(Supply).filter(Supply.id == supply_id, Supply.company_id == company_id).first()

    @staticmethod
    def save(db: Session, obj):
        db.add(obj)
        db.commit()
        db.refresh(obj)
        return obj

    @staticmethod
    def delete(db: Session, obj) -> None:
        db.delete(obj)
        db.commit()

    @staticmethod
    def get_requests(
        db: Session,
        company_id: int,
        status: Optional[str] = None,
        urgency: Optional[str] = None,
        employee_id: Optional[int] = None,
    ) -> list[SupplyRequest]:
        query = (
            db.query(SupplyRequest)
            .options(joinedload(SupplyRequest.employee))
            .filter(SupplyRequest.company_id == company_id)
        )
        if status and status != "all":
            query = query.filter(SupplyRequest.status == status)
        if urgency:
            query = query.filter(SupplyRequest.urgency == urgency)
        if employee_id:
            query = query.filter(SupplyRequest.employee_id == employee_id)
        return query.order_by(SupplyRequest.created_at.desc(), SupplyRequest.id.desc()).all()

    @staticmethod
    def get_request(
        db: Session, request_id: int, company_id: int, employee_id: Optional[int] = None
    ) -> Optional[SupplyRequest]:
        query = (
            db.query(SupplyRequest)
            .options(joinedload(SupplyRequest.employee))
            .filter(SupplyRequest.id == request_id, SupplyRequest.company_id == company_id)
        )
        if employee_id is not None:
            query = query.filter(SupplyRequest.employee_id == employee_id)
        return query.first()
