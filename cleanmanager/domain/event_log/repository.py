"""Event log repository - Database operations for the audit trail"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import EventLog


class EventLogRepository:
    """Repository for event log database operations"""

    @staticmethod
    def add_event(db: Session, **event_data) -> EventLog:
        """Stage an event in the current transaction (the caller commits)"""
        event = EventLog(**event_data)
        db.add(event)
        return event

    @staticmethod
    def list_events(
        db: Session,
        company_id: int,
        entity_type: Optional[str] = None,
        entity_id: Optional[int] = None,
        limit: int = 100,
    ) -> list[EventLog]:
        query = db.query(EventLog).filter(EventLog.company_id == company_id)
        if entity_type:
            query = query.filter(EventLog.entity_type == entity_type)
        if entity_id is not None:
            query = query.filter(EventLog.entity_id == entity_id)
        return query.order_by(EventLog.created_at.desc(), EventLog.id.desc()).limit(limit).all()
