"""Cleaning plan repository"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from ...models import CleaningPlan, Job, PlanTask


class CleaningPlanRepository:
    @staticmethod
    def get_plans(db: Session, company_id: int) -> list[CleaningPlan]:
        return (
            db.query(CleaningPlan)
            .options(selectinload(CleaningPlan.tasks))
            .filter(CleaningPlan.company_id == company_id)
            .order_by(CleaningPlan.created_at.desc(), CleaningPlan.id.desc())
            .all()
        )

    @staticmethod
    def get_plan_by_id(db: Session, plan_id: int, company_id: int) -> Optional[CleaningPlan]:
        return (
            db.query(CleaningPlan)
            .filter(CleaningPlan.id == plan_id, CleaningPlan.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_plan_by_name(
        db: Session, company_id: int, name: str, exclude_id: Optional[int] = None
    ) -> Optional[CleaningPlan]:
        query = db.query(CleaningPlan).filter(
            CleaningPlan.company_id == company_id,
            func.lower(CleaningPlan.name) == name.strip().lower(),
        )
        if exclude_id is not None:
            query = query.filter(CleaningPlan.id != exclude_id)
        return query.first()

    @staticmethod
    def create_plan(db: Session, company_id: int, tasks: list[dict], **plan_data) -> CleaningPlan:
        plan = CleaningPlan(company_id=company_id, **plan_data)
        for index, task in enumerate(tasks):
            plan.tasks.append(PlanTask(title=task["title"], description=task.get("description"), order=index))
        db.add(plan)
        db.commit()
        db.refresh(plan)
        return plan

    @staticmethod
    def update_plan(db: Session, plan: CleaningPlan, tasks: Optional[list[dict]], **updates) -> CleaningPlan:
        for key, value in updates.items():
            if hasattr(plan, key):
                setattr(plan, key, value)
        if tasks is not None:
            plan.tasks.clear()
            db.flush()
            for index, task in enumerate(tasks):
                plan.tasks.append(
                    PlanTask(title=task["title"], description=task.get("description"), order=index)
                )
        db.commit()
        db.refresh(plan)
        return plan

    @staticmethod
    def delete_plan(db: Session, plan: CleaningPlan) -> None:
        """Jobs keep their copied tasks; only the plan reference is cleared"""
        db.query(Job).filter(Job.plan_id == plan.id).update({Job.plan_id: None}, synchronize_session=False)
        db.delete(plan)
        db.commit()
