"""Supplies service - stock levels and the supply request workflow"""

import logging
import math
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_supply_request_created_email, send_supply_request_status_email
from ...models import Employee, User
from ...models_inventory import Supply, SupplyRequest
from ...security_utils import sanitize_text
from ...utils.dates import parse_datetime, utc_now
from ..company.service import office_recipients
from ..event_log.service import log_event
from .repository import SupplyRepository
from .schemas import SupplyCreate, SupplyRequestAction, SupplyRequestCreate, SupplyUpdate

logger = logging.getLogger(__name__)

DEFAULT_MIN_QUANTITY = 5
URGENCY_LEVELS = ("low", "normal", "high", "urgent")

# action -> (status it requires, status it sets)
REVIEW_ACTIONS = {
    "approve": (("pending",), "approved"),
    "deny": (("pending",), "denied"),
    "fulfill": (("approved",), "fulfilled"),
    "reopen": (("denied", "cancelled"), "pending"),
}
ACTION_ERRORS = {
    "approve": "Only pending requests can be approved",
    "deny": "Only pending requests can be denied",
    "fulfill": "Only approved requests can be fulfilled",
    "reopen": "Only denied or cancelled requests can be reopened",
}

SUPPLY_TEXT_FIELDS = {
    "description": "description",
    "category": "category",
    "sku": "sku",
    "unit": "unit",
    "supplier": "supplier",
    "notes": "notes",
}


def _non_negative_int(value: Any, default: int) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(0, int(number))


def stock_status(quantity: int, min_quantity: int) -> str:
    if quantity <= 0:
        return "out-of-stock"
    if quantity <= min_quantity:
        return "low-stock"
    return "in-stock"


def item_summary(items: list[dict]) -> str:
    """'2 x Bleach, 1 x Mop heads'"""
    return ", ".join(f"{item.get('quantity', 1)} x {item.get('name')}" for item in items)


def summarize_requests(requests: list[SupplyRequest], include_urgent: bool = False) -> dict:
    summary = {
        "total": len(requests),
        "pending": len([r for r in requests if r.status == "pending"]),
        "approved": len([r for r in requests if r.status == "approved"]),
        "denied": len([r for r in requests if r.status == "denied"]),
        "fulfilled": len([r for r in requests if r.status == "fulfilled"]),
    }
    if include_urgent:
        summary["urgent"] = len(
            [r for r in requests if r.status == "pending" and r.urgency in ("high", "urgent")]
        )
    return summary


class SupplyService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SupplyRepository()

    def get_supplies(
        self, user: User, search: Optional[str] = None, category: Optional[str] = None, status: Optional[str] = None
    ) -> list[Supply]:
        return self.repo.get_supplies(self.db, user.company_id, search, category, status)

    def get_supply(self, supply_id: int, user: User) -> Supply:
        supply = self.repo.get_supply(self.db, supply_id, user.company_id)
        if not supply:
            raise HTTPException(status_code=404, detail="Supply not found")
        return supply

    def create_supply(self, data: SupplyCreate, user: User) -> Supply:
        if not data.name or not data.name.strip():
            raise HTTPException(status_code=400, detail="Supply name is required")

        quantity = _non_negative_int(data.quantity, 0)
        min_quantity = _non_negative_int(data.minQuantity, DEFAULT_MIN_QUANTITY)
        supply = Supply(
            company_id=user.company_id,
            name=data.name.strip(),
            quantity=quantity,
            min_quantity=min_quantity,
            unit_cost=data.unitCost,
            status=stock_status(quantity, min_quantity),
            **{column: getattr(data, field) for field, column in SUPPLY_TEXT_FIELDS.items()},
        )
        supply = self.repo.save(self.db, supply)
        logger.info(f"✅ Supply {supply.id} created ({supply.status})")
        return supply

    def update_supply(self, supply_id: int, data: SupplyUpdate, user: User) -> Supply:
        supply = self.get_supply(supply_id, user)
        fields = data.model_fields_set

        if "name" in fields:
            if not data.name or not data.name.strip():
                raise HTTPException(status_code=400, detail="Supply name is required")
            supply.name = data.name.strip()
        for field, column in SUPPLY_TEXT_FIELDS.items():
            if field in fields:
                setattr(supply, column, getattr(data, field))
        if "unitCost" in fields:
            supply.unit_cost = data.unitCost
        if "quantity" in fields:
            supply.quantity = _non_negative_int(data.quantity, supply.quantity or 0)
        if "minQuantity" in fields:
            supply.min_quantity = _non_negative_int(data.minQuantity, DEFAULT_MIN_QUANTITY)

        supply.status = stock_status(supply.quantity or 0, supply.min_quantity or 0)
        return self.repo.save(self.db, supply)

    def delete_supply(self, supply_id: int, user: User) -> dict:
        supply = self.get_supply(supply_id, user)
        self.repo.delete(self.db, supply)
        logger.info(f"🗑️ Supply {supply_id} deleted")
        return {"message": "Supply deleted successfully", "id": supply_id}


class SupplyRequestService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SupplyRepository()

    # ------------------------------------------------------------------
    # Employee side
    # ------------------------------------------------------------------

    def get_own_requests(self, employee: Employee, status: Optional[str] = None) -> tuple[list[SupplyRequest], dict]:
        requests = self.repo.get_requests(self.db, employee.company_id, status, employee_id=employee.id)
        everything = (
            requests
            if not status or status == "all"
            else self.repo.get_requests(self.db, employee.company_id, employee_id=employee.id)
        )
        return requests, summarize_requests(everything)

    async def create_request(self, data: SupplyRequestCreate, employee: Employee) -> SupplyRequest:
        items = []
        for item in data.items or []:
            name = sanitize_text(item.name, 255)
            if not name:
                continue
            entry = {"name": name, "quantity": max(1, _non_negative_int(item.quantity, 1))}
            if item.unit:
                entry["unit"] = sanitize_text(item.unit, 50)
            if item.notes:
                entry["notes"] = sanitize_text(item.notes, 500)
            items.append(entry)
        if not items:
            raise HTTPException(status_code=400, detail="At least one item is required")

        urgency = data.urgency or "normal"
        if urgency not in URGENCY_LEVELS:
            raise HTTPException(status_code=400, detail="Invalid urgency")
        try:
            needed_by = parse_datetime(data.neededBy)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid needed by date")

        request = self.repo.save(
            self.db,
            SupplyRequest(
                company_id=employee.company_id,
                employee_id=employee.id,
                items=items,
                urgency=urgency,
                notes=sanitize_text(data.notes, 2000),
                needed_by=needed_by,
                status="pending",
            ),
        )
        log_event(
            self.db,
            employee.company_id,
            "supply_request_created",
            entity_type="supply_request",
            entity_id=request.id,
            employee_id=employee.id,
        )
        self.db.commit()
        logger.info(f"✅ Supply request {request.id} created by employee {employee.id}")

        company = employee.company
        for admin in office_recipients(self.db, company, "employeeUpdates"):
            try:
                await send_supply_request_created_email(
                    to=admin.email,
                    recipient_name=admin.first_name,
                    company_name=company.name,
                    employee_name=employee.full_name,
                    item_summary=item_summary(items),
                    urgency=urgency,
                )
            except Exception as e:
                logger.error(f"❌ Failed to send supply request email to {admin.email}: {e}")
        return request

    def cancel_request(self, request_id: int, action: Optional[str], employee: Employee) -> SupplyRequest:
        if action != "cancel":
            raise HTTPException(status_code=400, detail="Invalid action")
        request = self.repo.get_request(self.db, request_id, employee.company_id, employee.id)
        if not request:
            raise HTTPException(status_code=404, detail="Request not found")
        if request.status != "pending":
            raise HTTPException(status_code=400, detail="Only pending requests can be cancelled")
        request.status = "cancelled"
        return self.repo.save(self.db, request)

    # ------------------------------------------------------------------
    # Office side
    # ------------------------------------------------------------------

    def get_requests(
        self,
        user: User,
        status: Optional[str] = None,
        urgency: Optional[str] = None,
        employee_id: Optional[int] = None,
    ) -> tuple[list[SupplyRequest], dict]:
        requests = self.repo.get_requests(self.db, user.company_id, status, urgency, employee_id)
        everything = self.repo.get_requests(self.db, user.company_id)
        return requests, summarize_requests(everything, include_urgent=True)

    def get_request(self, request_id: int, user: User) -> SupplyRequest:
        request = self.repo.get_request(self.db, request_id, user.company_id)
        if not request:
            raise HTTPException(status_code=404, detail="Supply request not found")
        return request

    async def review_request(self, request_id: int, data: SupplyRequestAction, user: User) -> SupplyRequest:
        request = self.get_request(request_id, user)
        if data.action not in REVIEW_ACTIONS:
            raise HTTPException(status_code=400, detail="Invalid action")
        allowed, new_status = REVIEW_ACTIONS[data.action]
        if request.status not in allowed:
            raise HTTPException(status_code=400, detail=ACTION_ERRORS[data.action])

        now = utc_now()
        request.status = new_status
        if data.action == "reopen":
            request.reviewed_by = None
            request.reviewed_at = None
            request.review_notes = None
            request.fulfilled_at = None
        else:
            request.reviewed_by = user.id
            request.reviewed_at = now
            if data.reviewNotes is not None:
                request.review_notes = sanitize_text(data.reviewNotes, 2000)
            if data.action == "fulfill":
                request.fulfilled_at = now

        log_event(
            self.db,
            user.company_id,
            f"supply_request_{new_status}",
            entity_type="supply_request",
            entity_id=request.id,
            user_id=user.id,
        )
        request = self.repo.save(self.db, request)
        logger.info(f"✅ Supply request {request.id} -> {new_status} by user {user.id}")

        employee = request.employee
        if data.action != "reopen" and employee and employee.email:
            try:
                await send_supply_request_status_email(
                    to=employee.email,
                    employee_name=employee.first_name,
                    company_name=user.company.name,
                    status=new_status,
                    item_summary=item_summary(request.items or []),
                    review_notes=request.review_notes,
                )
            except Exception as e:
                logger.error(f"❌ Failed to send supply request status email to {employee.email}: {e}")
        return request
