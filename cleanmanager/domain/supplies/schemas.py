"""Supplies and supply request schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from ...models_inventory import Supply, SupplyRequest


class SupplyCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    sku: Optional[str] = None
    quantity: Any = None
    unit: Optional[str] = None
    minQuantity: Any = None
    unitCost: Optional[float] = None
    supplier: Optional[str] = None
    notes: Optional[str] = None


class SupplyUpdate(SupplyCreate):
    pass


class SupplyResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    sku: Optional[str] = None
    quantity: int = 0
    unit: Optional[str] = None
    minQuantity: int = 5
    unitCost: Optional[float] = None
    supplier: Optional[str] = None
    status: str
    notes: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, supply: Supply) -> "SupplyResponse":
        return cls(
            id=supply.id,
            name=supply.name,
            description=supply.description,
            category=supply.category,
            sku=supply.sku,
            quantity=supply.quantity or 0,
            unit=supply.unit,
            minQuantity=supply.min_quantity if supply.min_quantity is not None else 5,
            unitCost=supply.unit_cost,
            supplier=supply.supplier,
            status=supply.status,
            notes=supply.notes,
            createdAt=supply.created_at,
            updatedAt=supply.updated_at,
        )


class SupplyRequestItem(BaseModel):
    name: Optional[str] = None
    quantity: Any = 1
    unit: Optional[str] = None
    notes: Optional[str] = None


class SupplyRequestCreate(BaseModel):
    items: Optional[list[SupplyRequestItem]] = None
    urgency: Optional[str] = None
    notes: Optional[str] = None
    neededBy: Optional[str] = None


class SupplyRequestAction(BaseModel):
    action: Optional[str] = None
    reviewNotes: Optional[str] = None


class SupplyRequestResponse(BaseModel):
    id: int
    employeeId: int
    employeeName: Optional[str] = None
    items: list[dict]
    urgency: str
    notes: Optional[str] = None
    neededBy: Optional[datetime] = None
    status: str
    reviewedBy: Optional[int] = None
    reviewedAt: Optional[datetime] = None
    reviewNotes: Optional[str] = None
    fulfilledAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, request: SupplyRequest) -> "SupplyRequestResponse":
        return cls(
            id=request.id,
            employeeId=request.employee_id,
            employeeName=request.employee.full_name if request.employee else None,
            items=request.items or [],
            urgency=request.urgency or "normal",
            notes=request.notes,
            neededBy=request.needed_by,
            status=request.status,
            reviewedBy=request.reviewed_by,
            reviewedAt=request.reviewed_at,
            reviewNotes=request.review_notes,
            fulfilledAt=request.fulfilled_at,
            createdAt=request.created_at,
        )


class SupplyRequestSummary(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    denied: int = 0
    fulfilled: int = 0
    urgent: Optional[int] = None


class SupplyRequestListResponse(BaseModel):
    requests: list[SupplyRequestResponse]
    summary: SupplyRequestSummary
