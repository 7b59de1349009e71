"""Cleaning plan schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class PlanTaskInput(BaseModel):
    title: str
    description: Optional[str] = None


class CleaningPlanCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    estimatedDuration: Optional[str] = None
    price: Optional[float] = None
    isActive: Optional[bool] = None
    tasks: Optional[list[PlanTaskInput]] = None


class CleaningPlanUpdate(CleaningPlanCreate):
    pass


class PlanTaskResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    order: int

    class Config:
        from_attributes = True


class CleaningPlanResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    estimatedDuration: Optional[str] = None
    price: Optional[float] = None
    isActive: bool = True
    tasks: list[PlanTaskResponse] = []
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, plan) -> "CleaningPlanResponse":
        return cls(
            id=plan.id,
            name=plan.name,
            description=plan.description,
            category=plan.category,
            estimatedDuration=plan.estimated_duration,
            price=plan.price,
            isActive=bool(plan.is_active),
            tasks=[PlanTaskResponse.model_validate(t) for t in plan.tasks],
            createdAt=plan.created_at,
        )
