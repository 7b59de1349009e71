"""Check-in repository - GPS check-in / check-out records"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import JobCheckIn


class CheckInRepository:
    @staticmethod
    def get_for_job_employee(db: Session, job_id: int, employee_id: int) -> list[JobCheckIn]:
        return (
            db.query(JobCheckIn)
            .filter(JobCheckIn.job_id == job_id, JobCheckIn.employee_id == employee_id)
            .order_by(JobCheckIn.checked_at.asc(), JobCheckIn.id.asc())
            .all()
        )

    @staticmethod
    def find(db: Session, job_id: int, employee_id: int, check_type: str) -> Optional[JobCheckIn]:
        return (
            db.query(JobCheckIn)
            .filter(
                JobCheckIn.job_id == job_id,
                JobCheckIn.employee_id == employee_id,
                JobCheckIn.type == check_type,
            )
            .first()
        )

    @staticmethod
    def get_check_ins(
        db: Session,
        company_id: int,
        job_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> list[JobCheckIn]:
        query = (
            db.query(JobCheckIn)
            .options(joinedload(JobCheckIn.employee), joinedload(JobCheckIn.job))
            .filter(JobCheckIn.company_id == company_id)
        )
        if job_id:
            query = query.filter(JobCheckIn.job_id == job_id)
        if employee_id:
            query = query.filter(JobCheckIn.employee_id == employee_id)
        return query.order_by(JobCheckIn.checked_at.desc(), JobCheckIn.id.desc()).limit(limit).all()

    @staticmethod
    def add(db: Session, check_in: JobCheckIn) -> JobCheckIn:
        db.add(check_in)
        db.flush()
        return check_in
