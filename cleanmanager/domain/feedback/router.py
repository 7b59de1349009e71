"""Feedback router - public token links and office endpoints"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import FeedbackListResponse, FeedbackResponse, FeedbackSubmit, PublicFeedbackJob
from .service import FeedbackService

router = APIRouter(tags=["Feedback"])


def get_feedback_service(db: Session = Depends(get_db)) -> FeedbackService:
    return FeedbackService(db)


@router.get("/public/feedback/{token}", response_model=PublicFeedbackJob)
async def get_feedback_job(token: str, service: FeedbackService = Depends(get_feedback_service)):
    return service.get_public_job(token)


@router.post("/public/feedback/{token}")
async def submit_feedback(
    token: str,
    data: FeedbackSubmit,
    service: FeedbackService = Depends(get_feedback_service),
):
    return service.submit(token, data)


@router.get("/feedback", response_model=FeedbackListResponse)
async def get_feedback(
    customerId: Optional[int] = Query(None),
    minRating: Optional[int] = Query(None, ge=1, le=5),
    maxRating: Optional[int] = Query(None, ge=1, le=5),
    current_user: User = Depends(get_current_user),
    service: FeedbackService = Depends(get_feedback_service),
):
    feedback, summary = service.get_feedback(current_user, customerId, minRating, maxRating)
    return FeedbackListResponse(feedback=[FeedbackResponse.from_model(f) for f in feedback], summary=summary)


@router.post("/jobs/{job_id}/request-feedback")
async def request_feedback(
    job_id: int,
    current_user: User = Depends(get_current_user),
    service: FeedbackService = Depends(get_feedback_service),
):
    return await service.request_feedback(job_id, current_user)
