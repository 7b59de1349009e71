"""Feedback repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import CustomerFeedback, Job


class FeedbackRepository:
    @staticmethod
    def get_job_by_token(db: Session, token: str) -> Optional[Job]:
        return (
            db.query(Job)
            .options(joinedload(Job.customer), joinedload(Job.assignee))
            .filter(Job.feedback_token == token)
            .first()
        )

    @staticmethod
    def get_job(db: Session, job_id: int, company_id: int) -> Optional[Job]:
        return (
            db.query(Job)
            .options(joinedload(Job.customer))
            .filter(Job.id == job_id, Job.company_id == company_id)
            .first()
        )

    @staticmethod
    def get_feedback(
        db: Session,
        company_id: int,
        customer_id: Optional[int] = None,
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
    ) -> list[CustomerFeedback]:
        query = (
            db.query(CustomerFeedback)
            .options(
                joinedload(CustomerFeedback.customer),
                joinedload(CustomerFeedback.job).joinedload(Job.assignee),
            )
            .filter(CustomerFeedback.company_id == company_id)
        )
        if customer_id:
            query = query.filter(CustomerFeedback.customer_id == customer_id)
        if min_rating is not None:
            query = query.filter(CustomerFeedback.rating >= min_rating)
        if max_rating is not None:
            query = query.filter(CustomerFeedback.rating <= max_rating)
        return query.order_by(CustomerFeedback.created_at.desc(), CustomerFeedback.id.desc()).all()

    @staticmethod
    def add_feedback(db: Session, feedback: CustomerFeedback) -> CustomerFeedback:
        db.add(feedback)
        db.flush()
        return feedback
