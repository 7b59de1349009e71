"""Event log router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import EventLogResponse
from .service import EventLogService

router = APIRouter(prefix="/event-log", tags=["Event Log"])


def get_event_log_service(db: Session = Depends(get_db)) -> EventLogService:
    return EventLogService(db)


@router.get("", response_model=list[EventLogResponse])
async def list_events(
    entityType: Optional[str] = Query(None),
    entityId: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    service: EventLogService = Depends(get_event_log_service),
):
    """Company audit trail, newest first"""
    events = service.list_events(current_user, entityType, entityId, limit)
    return [EventLogResponse.from_model(e) for e in events]
