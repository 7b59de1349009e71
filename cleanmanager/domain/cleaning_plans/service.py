"""Cleaning plan service"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import CleaningPlan, User
from .repository import CleaningPlanRepository
from .schemas import CleaningPlanCreate, CleaningPlanUpdate, PlanTaskInput

logger = logging.getLogger(__name__)


def _normalize_tasks(tasks: Optional[list[PlanTaskInput]]) -> Optional[list[dict]]:
    """Trim titles, drop blanks and reject duplicates (case-insensitive)"""
    if tasks is None:
        return None
    cleaned = []
    seen = set()
    for task in tasks:
        title = (task.title or "").strip()
        if not title:
            continue
        key = title.lower()
        if key in seen:
            raise HTTPException(
                status_code=400, detail="Duplicate task names are not allowed within the same plan"
            )
        seen.add(key)
        cleaned.append({"title": title, "description": (task.description or "").strip() or None})
    return cleaned


class CleaningPlanService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CleaningPlanRepository()

    def get_plans(self, user: User) -> list[CleaningPlan]:
        return self.repo.get_plans(self.db, user.company_id)

    def get_plan(self, plan_id: int, user: User) -> CleaningPlan:
        plan = self.repo.get_plan_by_id(self.db, plan_id, user.company_id)
        if not plan:
            raise HTTPException(status_code=404, detail="Cleaning plan not found")
        return plan

    @staticmethod
    def _validate_price(price: Optional[float]) -> None:
        if price is not None and price < 0:
            raise HTTPException(status_code=400, detail="Price cannot be negative")

    def create_plan(self, data: CleaningPlanCreate, user: User) -> CleaningPlan:
        name = (data.name or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Plan name is required")
        self._validate_price(data.price)
        if self.repo.get_plan_by_name(self.db, user.company_id, name):
            raise HTTPException(status_code=409, detail="A cleaning plan with this name already exists")

        tasks = _normalize_tasks(data.tasks) or []
        plan = self.repo.create_plan(
            self.db,
            user.company_id,
            tasks,
            name=name,
            description=data.description,
            category=data.category,
            estimated_duration=data.estimatedDuration,
            price=data.price,
            is_active=True if data.isActive is None else data.isActive,
        )
        logger.info(f"✅ Cleaning plan {plan.id} created with {len(tasks)} tasks")
        return plan

    def update_plan(self, plan_id: int, data: CleaningPlanUpdate, user: User) -> CleaningPlan:
        plan = self.get_plan(plan_id, user)
        fields = data.model_fields_set
        updates = {}

        if "name" in fields:
            name = (data.name or "").strip()
            if not name:
                raise HTTPException(status_code=400, detail="Plan name is required")
            if self.repo.get_plan_by_name(self.db, user.company_id, name, exclude_id=plan.id):
                raise HTTPException(status_code=409, detail="A cleaning plan with this name already exists")
            updates["name"] = name
        if "price" in fields:
            self._validate_price(data.price)
            updates["price"] = data.price

        for field, column in (
            ("description", "description"),
            ("category", "category"),
            ("estimatedDuration", "estimated_duration"),
            ("isActive", "is_active"),
        ):
            if field in fields:
                updates[column] = getattr(data, field)

        tasks = _normalize_tasks(data.tasks) if "tasks" in fields else None
        return self.repo.update_plan(self.db, plan, tasks, **updates)

    def delete_plan(self, plan_id: int, user: User) -> dict:
        plan = self.get_plan(plan_id, user)
        self.repo.delete_plan(self.db, plan)
        logger.info(f"✅ Cleaning plan {plan_id} deleted")
        return {"message": "Cleaning plan deleted"}
