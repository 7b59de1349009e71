"""Employee repository - Database operations for employees"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Company, Employee, Job, JobAssignment, JobCheckIn, JobTask, ShiftSwapRequest, TimeOffRequest, User
from ...models_inventory import Equipment, SupplyRequest

ACTIVE_JOB_STATUSES = ("scheduled", "in-progress")


class EmployeeRepository:
    @staticmethod
    def get_employees(db: Session, company_id: int, status: Optional[str] = None) -> list[Employee]:
        query = db.query(Employee).filter(Employee.company_id == company_id)
        if status:
            query = query.filter(Employee.status == status)
        return query.order_by(Employee.created_at.desc(), Employee.id.desc()).all()

    @staticmethod
    def get_employee_by_id(db: Session, employee_id: int, company_id: int) -> Optional[Employee]:
        return (
            db.query(Employee)
            .filter(Employee.id == employee_id, Employee.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_employees_by_ids(db: Session, employee_ids: list[int], company_id: int) -> list[Employee]:
        if not employee_ids:
            return []
        return (
            db.query(Employee)
            .filter(Employee.id.in_(employee_ids), Employee.company_id == company_id)
            .all()
        )

    @staticmethod
    def count_employees(db: Session, company_id: int) -> int:
        return db.query(func.count(Employee.id)).filter(Employee.company_id == company_id).scalar() or 0

    @staticmethod
    def find_duplicate(
        db: Session, company_id: int, email: Optional[str], phone: Optional[str], exclude_id: Optional[int] = None
    ) -> Optional[str]:
        """Name of the clashing field, if any"""
        base = db.query(Employee).filter(Employee.company_id == company_id)
        if exclude_id is not None:
            base = base.filter(Employee.id != exclude_id)
        if email and base.filter(func.lower(Employee.email) == email.lower()).first():
            return "email"
        if phone and base.filter(Employee.phone == phone).first():
            return "phone"
        return None

    @staticmethod
    def username_taken(db: Session, username: str, exclude_id: Optional[int] = None) -> bool:
        query = db.query(Employee).filter(func.lower(Employee.username) == username.lower())
        if exclude_id is not None:
            query = query.filter(Employee.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def email_used_by_company_account(db: Session, company: Company, email: str) -> bool:
        """Employees may not reuse the company email or any back-office user email"""
        if company.email and company.email.lower() == email.lower():
            return True
        return (
            db.query(User)
            .filter(User.company_id == company.id, func.lower(User.email) == email.lower())
            .first()
            is not None
        )

    @staticmethod
    def count_active_jobs(db: Session, employee_id: int, company_id: int) -> int:
        assigned_job_ids = db.query(JobAssignment.job_id).filter(
            JobAssignment.employee_id == employee_id, JobAssignment.status != "declined"
        )
        return (
            db.query(func.count(Job.id))
            .filter(
                Job.company_id == company_id,
                Job.status.in_(ACTIVE_JOB_STATUSES),
                or_(Job.assigned_to == employee_id, Job.id.in_(assigned_job_ids)),
            )
            .scalar()
            or 0
        )

    @staticmethod
    def create_employee(db: Session, company_id: int, **employee_data) -> Employee:
        employee = Employee(company_id=company_id, **employee_data)
        db.add(employee)
        db.commit()
        db.refresh(employee)
        return employee

    @staticmethod
    def update_employee(db: Session, employee: Employee, **updates) -> Employee:
        for key, value in updates.items():
            if hasattr(employee, key):
                setattr(employee, key, value)
        db.commit()
        db.refresh(employee)
        return employee

    @staticmethod
    def delete_employee(db: Session, employee: Employee) -> None:
        """Remove the employee and detach them from historical records"""
        employee_id = employee.id
        db.query(Job).filter(Job.assigned_to == employee_id).update(
            {Job.assigned_to: None}, synchronize_session=False
        )
        db.query(JobTask).filter(JobTask.completed_by == employee_id).update(
            {JobTask.completed_by: None}, synchronize_session=False
        )
        db.query(Equipment).filter(Equipment.assigned_to == employee_id).update(
            {Equipment.assigned_to: None}, synchronize_session=False
        )
        db.query(JobCheckIn).filter(JobCheckIn.employee_id == employee_id).delete(synchronize_session=False)
        db.query(TimeOffRequest).filter(TimeOffRequest.employee_id == employee_id).delete(
            synchronize_session=False
        )
        db.query(SupplyRequest).filter(SupplyRequest.employee_id == employee_id).delete(
            synchronize_session=False
        )
        db.query(ShiftSwapRequest).filter(
            or_(
                ShiftSwapRequest.from_employee_id == employee_id,
                ShiftSwapRequest.to_employee_id == employee_id,
            )
        ).delete(synchronize_session=False)
        db.delete(employee)
        db.commit()
