"""Job completion helpers shared by the office, employee and check-in flows"""

import re
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...config import FRONTEND_URL
from ...models import Job
from ...security_utils import generate_secure_token
from ...utils.dates import utc_now


def _address_key(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", value.lower())


def build_full_address(job: Job) -> str:
    """Join location parts, skipping any part already contained in the address"""
    parts: list[str] = []
    for part in (job.location, job.address_line2, job.city, job.postcode):
        part = (part or "").strip()
        if not part:
            continue
        if parts and _address_key(part) in _address_key(", ".join(parts)):
            continue
        parts.append(part)
    return ", ".join(parts)


def feedback_url(token: str) -> str:
    return f"{FRONTEND_URL}/feedback/{token}"


def completion_price(job: Job, actual_price: Optional[float] = None) -> Optional[float]:
    """Explicit price, else the job's actual then estimated price, else the plan price"""
    if actual_price is not None:
        return actual_price
    if job.actual_price is not None:
        return job.actual_price
    if job.estimated_price is not None:
        return job.estimated_price
    if job.plan is not None and job.plan.price:
        return round(float(job.plan.price), 2)
    return None


def ensure_feedback_token(job: Job) -> str:
    if not job.feedback_token:
        job.feedback_token = generate_secure_token(24)
    return job.feedback_token


def mark_job_completed(
    db: Session, job: Job, actual_price: Optional[float] = None, now: Optional[datetime] = None
) -> Job:
    """
    Complete a job in the caller's transaction: status, completion time, price,
    feedback token, and every non-declined assignment.
    """
    now = now or utc_now()
    job.status = "completed"
    job.completed_at = job.completed_at or now
    job.actual_price = completion_price(job, actual_price)
    ensure_feedback_token(job)
    for assignment in job.assignments:
        if assignment.status != "declined":
            assignment.status = "completed"
            assignment.completed_at = assignment.completed_at or now
    db.flush()
    return job
