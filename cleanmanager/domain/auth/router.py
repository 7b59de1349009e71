"""Auth router - sign up, sign in, password recovery"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...rate_limiter import create_rate_limiter
from .schemas import (
    AuthResponse,
    EmployeeAuthResponse,
    EmployeeSigninRequest,
    ForgotPasswordRequest,
    MeResponse,
    ResetPasswordRequest,
    SigninRequest,
    SignupRequest,
)
from .service import AuthService

router = APIRouter(prefix="/auth", tags=["Auth"])

signup_limiter = create_rate_limiter(limit=10, window_seconds=3600, key_prefix="auth_signup")
signin_limiter = create_rate_limiter(
    limit=20,
    window_seconds=900,
    key_prefix="auth_signin",
    message="Too many sign in attempts. Please try again later.",
)
password_reset_limiter = create_rate_limiter(limit=5, window_seconds=3600, key_prefix="auth_password_reset")


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: SignupRequest,
    _: None = Depends(signup_limiter),
    service: AuthService = Depends(get_auth_service),
):
    """Register a new company and its admin user"""
    return service.signup(data)


@router.post("/signin", response_model=AuthResponse)
async def signin(
    data: SigninRequest,
    _: None = Depends(signin_limiter),
    service: AuthService = Depends(get_auth_service),
):
    return service.signin(data)


@router.post("/employee-signin", response_model=EmployeeAuthResponse)
async def employee_signin(
    data: EmployeeSigninRequest,
    _: None = Depends(signin_limiter),
    service: AuthService = Depends(get_auth_service),
):
    return service.employee_signin(data)


@router.post("/forgot-password")
async def forgot_password(
    data: ForgotPasswordRequest,
    _: None = Depends(password_reset_limiter),
    service: AuthService = Depends(get_auth_service),
):
    return await service.forgot_password(data)


@router.post("/reset-password")
async def reset_password(
    data: ResetPasswordRequest,
    service: AuthService = Depends(get_auth_service),
):
    return service.reset_password(data)


@router.get("/me", response_model=MeResponse)
async def me(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
):
    return service.me(current_user)
