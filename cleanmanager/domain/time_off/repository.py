"""Time-off repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import TimeOffRequest


class TimeOffRepository:
    @staticmethod
    def get_requests(
        db: Session, company_id: int, status: Optional[str] = None, employee_id: Optional[int] = None
    ) -> list[TimeOffRequest]:
        query = (
            db.query(TimeOffRequest)
            .options(joinedload(TimeOffRequest.employee))
            .filter(TimeOffRequest.company_id == company_id)
        )
        if status and status != "all":
            query = query.filter(TimeOffRequest.status == status)
        if employee_id:
            query = query.filter(TimeOffRequest.employee_id == employee_id)
        return query.order_by(TimeOffRequest.created_at.desc(), TimeOffRequest.id.desc()).all()

    @staticmethod
    def get_request(
        db: Session, request_id: int, company_id: int, employee_id: Optional[int] = None
    ) -> Optional[TimeOffRequest]:
        query = (
            db.query(TimeOffRequest)
            .options(joinedload(TimeOffRequest.employee))
            .filter(TimeOffRequest.id == request_id, TimeOffRequest.company_id == company_id)
        )
        if employee_id is not None:
            query = query.filter(TimeOffRequest.employee_id == employee_id)
        return query.first()

    @staticmethod
    def get_pending_for_employee(db: Session, employee_id: int) -> list[TimeOffRequest]:
        return (
            db.query(TimeOffRequest)
            .filter(TimeOffRequest.employee_id == employee_id, TimeOffRequest.status == "pending")
            .all()
        )

    @staticmethod
    def save(db: Session, request: TimeOffRequest) -> TimeOffRequest:
        db.add(request)
        db.commit()
        db.refresh(request)
        return request

    @staticmethod
    def delete(db: Session, request: TimeOffRequest) -> None:
        db.delete(request)
        db.commit()
