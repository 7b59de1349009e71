"""Feedback schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from ...models import CustomerFeedback


class FeedbackSubmit(BaseModel):
    rating: Any = None
    comment: Optional[str] = None


class PublicFeedbackJob(BaseModel):
    alreadySubmitted: bool = False
    message: Optional[str] = None
    jobId: Optional[int] = None
    jobTitle: Optional[str] = None
    completedAt: Optional[datetime] = None
    customerName: Optional[str] = None
    staffName: Optional[str] = None
    companyName: Optional[str] = None


class FeedbackResponse(BaseModel):
    id: int
    jobId: Optional[int] = None
    jobTitle: Optional[str] = None
    customerId: Optional[int] = None
    customerName: Optional[str] = None
    staffName: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    createdAt: Optional[datetime] = None

    class Config:
        from_attributes = True

    @classmethod
    def from_model(cls, feedback: CustomerFeedback) -> "FeedbackResponse":
        job = feedback.job
        return cls(
            id=feedback.id,
            jobId=feedback.job_id,
            jobTitle=job.title if job else None,
            customerId=feedback.customer_id,
            customerName=feedback.customer.full_name if feedback.customer else None,
            staffName=job.assignee.full_name if job and job.assignee else None,
            rating=feedback.rating,
            comment=feedback.comment,
            createdAt=feedback.created_at,
        )


class RatingDistribution(BaseModel):
    excellent: int = 0
    good: int = 0
    average: int = 0
    poor: int = 0


class FeedbackSummary(BaseModel):
    totalFeedback: int = 0
    averageRating: Optional[float] = None
    ratingDistribution: RatingDistribution


class FeedbackListResponse(BaseModel):
    feedback: list[FeedbackResponse]
    summary: FeedbackSummary
