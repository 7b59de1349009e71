"""Feedback service - public rating links and the office overview"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_feedback_request_email
from ...models import Company, CustomerFeedback, Job, User
from ...security_utils import sanitize_text
from ..event_log.service import log_event
from ..jobs.lifecycle import ensure_feedback_token, feedback_url
from ..jobs.repository import JobRepository
from .repository import FeedbackRepository
from .schemas import FeedbackSubmit

logger = logging.getLogger(__name__)

MAX_FEEDBACK_LENGTH = 2000


def parse_rating(value: Any) -> int:
    """Whole number 1-5; anything else is rejected"""
    if isinstance(value, bool):
        raise HTTPException(status_code=400, detail="Rating must be between 1 and 5")
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Rating must be between 1 and 5")
    if not rating.is_integer() or rating < 1 or rating > 5:
        raise HTTPException(status_code=400, detail="Rating must be between 1 and 5")
    return int(rating)


def summarize_ratings(ratings: list[int]) -> dict:
    average = round(sum(ratings) / len(ratings), 2) if ratings else None
    return {
        "totalFeedback": len(ratings),
        "averageRating": average,
        "ratingDistribution": {
            "excellent": len([r for r in ratings if r >= 5]),
            "good": len([r for r in ratings if r == 4]),
            "average": len([r for r in ratings if r == 3]),
            "poor": len([r for r in ratings if r <= 2]),
        },
    }


def _already_submitted(job: Job) -> bool:
    return bool(job.quality_rating or job.customer_feedback)


class FeedbackService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = FeedbackRepository()

    def _job_for_token(self, token: str) -> Job:
        job = self.repo.get_job_by_token(self.db, token) if token else None
        if not job:
            raise HTTPException(status_code=404, detail="Invalid or expired feedback link")
        return job

    def get_public_job(self, token: str) -> dict:
        job = self._job_for_token(token)
        if _already_submitted(job):
            return {
                "alreadySubmitted": True,
                "message": "Thank you! You've already submitted feedback for this job.",
            }
        company = self.db.get(Company, job.company_id)
        return {
            "alreadySubmitted": False,
            "jobId": job.id,
            "jobTitle": job.title,
            "completedAt": job.completed_at,
            "customerName": job.customer.first_name if job.customer else None,
            "staffName": job.assignee.full_name if job.assignee else None,
            "companyName": company.name if company else None,
        }

    def submit(self, token: str, data: FeedbackSubmit) -> dict:
        rating = parse_rating(data.rating)
        job = self._job_for_token(token)
        if _already_submitted(job):
            raise HTTPException(status_code=400, detail="Feedback has already been submitted for this job")

        comment = sanitize_text(data.comment, MAX_FEEDBACK_LENGTH)
        job.quality_rating = rating
        job.customer_feedback = comment
        self.repo.add_feedback(
            self.db,
            CustomerFeedback(
                company_id=job.company_id,
                customer_id=job.customer_id,
                job_id=job.id,
                rating=rating,
                comment=comment,
                feedback_token=token,
            ),
        )
        JobRepository.add_job_event(
            self.db, job.id, "feedback_received", f"Customer rated the job {rating}/5", meta={"rating": rating}
        )
        log_event(
            self.db,
            job.company_id,
            "feedback_received",
            entity_type="job",
            entity_id=job.id,
            meta={"rating": rating},
        )
        self.db.commit()
        logger.info(f"✅ Feedback ({rating}/5) received for job {job.id}")
        return {"success": True, "message": "Thank you for your feedback!"}

    def get_feedback(
        self,
        user: User,
        customer_id: Optional[int] = None,
        min_rating: Optional[int] = None,
        max_rating: Optional[int] = None,
    ) -> tuple[list[CustomerFeedback], dict]:
        feedback = self.repo.get_feedback(self.db, user.company_id, customer_id, min_rating, max_rating)
        return feedback, summarize_ratings([f.rating for f in feedback])

    async def request_feedback(self, job_id: int, user: User) -> dict:
        job = self.repo.get_job(self.db, job_id, user.company_id)
        if not job:
            raise HTTPException(status_code=404, detail="Job not found")
        if job.status != "completed":
            raise HTTPException(status_code=400, detail="Feedback can only be requested for completed jobs")
        if _already_submitted(job):
            raise HTTPException(status_code=400, detail="Feedback has already been submitted for this job")
        customer = job.customer
        if not customer or not customer.email:
            raise HTTPException(status_code=400, detail="Customer has no email address")

        token = ensure_feedback_token(job)
        self.db.commit()

        url = feedback_url(token)
        try:
            await send_feedback_request_email(
                to=customer.email,
                customer_name=customer.first_name,
                company_name=user.company.name,
                job_title=job.title,
                feedback_url=url,
            )
        except Exception as e:
            logger.error(f"❌ Failed to send feedback request for job {job.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send feedback request")

        JobRepository.add_job_event(
            self.db, job.id, "feedback_requested", "Feedback request sent to customer", actor_id=user.id
        )
        self.db.commit()
        logger.info(f"📧 Feedback request for job {job.id} sent to {customer.email}")
        return {"success": True, "message": "Feedback request sent", "feedbackUrl": url}
