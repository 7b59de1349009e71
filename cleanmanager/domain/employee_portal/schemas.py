"""Employee portal schemas"""

from typing import Optional

from pydantic import BaseModel

from ..jobs.schemas import JobResponse


class DeclineJobRequest(BaseModel):
    reason: Optional[str] = None


class TaskStatusUpdate(BaseModel):
    status: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    currentPassword: Optional[str] = None
    newPassword: Optional[str] = None


class JobResponseResult(BaseModel):
    success: bool
    message: str
    awaitingOthers: bool = False
    job: JobResponse
