"""Event log schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class EventLogResponse(BaseModel):
    id: int
    eventType: str
    entityType: Optional[str] = None
    entityId: Optional[int] = None
    userId: Optional[int] = None
    employeeId: Optional[int] = None
    description: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    createdAt: Optional[datetime] = None

    @classmethod
    def from_model(cls, event) -> "EventLogResponse":
        return cls(
            id=event.id,
            eventType=event.event_type,
            entityType=event.entity_type,
            entityId=event.entity_id,
            userId=event.user_id,
            employeeId=event.employee_id,
            description=event.description,
            meta=event.meta,
            createdAt=event.created_at,
        )
