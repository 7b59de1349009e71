"""Company router - profile and notification settings"""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from .schemas import CompanyProfileResponse, CompanyProfileUpdate, NotificationSettingsResponse
from .service import CompanyService

router = APIRouter(prefix="/company", tags=["Company"])


def get_company_service(db: Session = Depends(get_db)) -> CompanyService:
    return CompanyService(db)


@router.get("/profile", response_model=CompanyProfileResponse)
async def get_profile(
    current_user: User = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
):
    return CompanyProfileResponse.from_model(service.get_company(current_user))


@router.put("/profile", response_model=CompanyProfileResponse)
async def update_profile(
    data: CompanyProfileUpdate,
    current_user: User = Depends(require_admin),
    service: CompanyService = Depends(get_company_service),
):
    return CompanyProfileResponse.from_model(service.update_profile(data, current_user))


@router.get("/notifications", response_model=NotificationSettingsResponse)
async def get_notification_settings(
    current_user: User = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
):
    return {"settings": service.get_notification_settings(current_user)}


@router.put("/notifications", response_model=NotificationSettingsResponse)
async def update_notification_settings(
    payload: Any = Body(...),
    current_user: User = Depends(require_admin),
    service: CompanyService = Depends(get_company_service),
):
    return {"settings": service.update_notification_settings(payload, current_user)}
