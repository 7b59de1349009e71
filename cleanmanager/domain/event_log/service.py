"""Event log service - Company audit trail"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...models import EventLog, User
from .repository import EventLogRepository

logger = logging.getLogger(__name__)


def log_event(
    db: Session,
    company_id: int,
    event_type: str,
    entity_type: Optional[str] = None,
    entity_id: Optional[int] = None,
    description: Optional[str] = None,
    user_id: Optional[int] = None,
    employee_id: Optional[int] = None,
    meta: Optional[dict[str, Any]] = None,
) -> Optional[EventLog]:
    """
    Record an audit event in the caller's transaction.

    Never raises: a failure to stage the event is logged and the
    surrounding operation carries on.
    """
    try:
        return EventLogRepository.add_event(
            db,
            company_id=company_id,
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            user_id=user_id,
            employee_id=employee_id,
            meta=meta,
        )
    except Exception as e:
        logger.error(f"❌ Failed to log event {event_type}: {e}")
        return None


class EventLogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = EventLogRepository()

    def list_events(
        self,
        user: User,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        limit: int = 100,
    ) -> list[EventLog]:
        return self.repo.list_events(self.db, user.company_id, entity_type, entity_id, limit)
