"""Employee portal repository - jobs as seen by the assigned employee"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Job, JobAssignment, JobTask


class EmployeePortalRepository:
    @staticmethod
    def get_jobs_for_employee(
        db: Session, employee_id: int, company_id: int, status: Optional[str] = None
    ) -> list[Job]:
        assigned_job_ids = db.query(JobAssignment.job_id).filter(
            JobAssignment.employee_id == employee_id, JobAssignment.status != "declined"
        )
        query = (
            db.query(Job)
            .options(joinedload(Job.customer), selectinload(Job.assignments), selectinload(Job.tasks))
            .filter(Job.company_id == company_id, Job.id.in_(assigned_job_ids))
        )
        if status:
            query = query.filter(Job.status == status)
        return query.order_by(Job.scheduled_for.asc(), Job.id.asc()).all()

    @staticmethod
    def get_assignment(
        db: Session, job_id: int, employee_id: int, company_id: int, include_declined: bool = False
    ) -> Optional[JobAssignment]:
        query = (
            db.query(JobAssignment)
            .options(joinedload(JobAssignment.job))
            .filter(
                JobAssignment.job_id == job_id,
                JobAssignment.employee_id == employee_id,
                JobAssignment.company_id == company_id,
            )
        )
        if not include_declined:
            query = query.filter(JobAssignment.status != "declined")
        return query.first()

    @staticmethod
    def get_job(db: Session, job_id: int, company_id: int) -> Optional[Job]:
        return (
            db.query(Job)
            .options(
                joinedload(Job.customer),
                selectinload(Job.assignments).joinedload(JobAssignment.employee),
                selectinload(Job.tasks),
            )
            .filter(Job.id == job_id, Job.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_task(db: Session, job_id: int, task_id: int) -> Optional[JobTask]:
        return db.query(JobTask).filter(JobTask.id == task_id, JobTask.job_id == job_id).first()
