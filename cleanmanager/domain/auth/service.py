"""Auth service - Company signup, sign in and password recovery"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import create_employee_token, create_user_token
from ...config import FRONTEND_URL, PASSWORD_RESET_MAX_AGE
from ...email_service import send_password_reset_email
from ...models import User
from ...security_utils import (
    check_password_strength,
    generate_timed_token,
    hash_password,
    verify_password,
    verify_timed_token,
)
from ...shared.validators import is_valid_email
from ...utils.dates import utc_now
from ..event_log.service import log_event
from .repository import AuthRepository
from .schemas import (
    AuthResponse,
    CompanySummary,
    EmployeeAuthResponse,
    EmployeeSigninRequest,
    EmployeeSummary,
    ForgotPasswordRequest,
    MeResponse,
    ResetPasswordRequest,
    SigninRequest,
    SignupRequest,
    UserSummary,
)

logger = logging.getLogger(__name__)

RESET_TOKEN_SALT = "password-reset"
FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, a password reset link has been sent."


class AuthService:
    """Service layer for authentication"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AuthRepository()

    def signup(self, data: SignupRequest) -> AuthResponse:
        """Create a company and its admin user"""
        if not all([data.companyName, data.companyEmail, data.firstName, data.lastName, data.email, data.password]):
            raise HTTPException(status_code=400, detail="Missing required fields")

        email = data.email.lower()
        company_email = data.companyEmail.lower()
        if not is_valid_email(email) or not is_valid_email(company_email):
            raise HTTPException(status_code=400, detail="Invalid email format")

        problems = check_password_strength(data.password)
        if problems:
            raise HTTPException(status_code=400, detail=problems[0])

        if self.repo.get_user_by_email(self.db, email):
            raise HTTPException(status_code=409, detail="An account with this email already exists")
        if self.repo.get_company_by_email(self.db, company_email):
            raise HTTPException(status_code=409, detail="A company with this email already exists")

        logger.info(f"📥 Creating company {data.companyName} for {email}")
        company, user = self.repo.create_company_with_admin(
            self.db,
            company_data={
                "name": data.companyName,
                "email": company_email,
                "phone": data.companyPhone,
                "business_type": data.businessType,
                "subscription_plan": "trial",
            },
            user_data={
                "email": email,
                "password_hash": hash_password(data.password),
                "first_name": data.firstName,
                "last_name": data.lastName,
                "role": "admin",
            },
        )

        log_event(
            self.db,
            company.id,
            "company_created",
            entity_type="company",
            entity_id=company.id,
            description=f"{company.name} signed up",
            user_id=user.id,
        )
        self.db.commit()
        logger.info(f"✅ Company {company.id} created with admin user {user.id}")

        return AuthResponse(
            token=create_user_token(user),
            user=UserSummary.from_model(user),
            company=CompanySummary.from_model(company),
        )

    def signin(self, data: SigninRequest) -> AuthResponse:
        if not data.email or not data.password:
            raise HTTPException(status_code=400, detail="Email and password are required")

        user = self.repo.get_user_by_email(self.db, data.email.strip())
        if not user or not user.is_active or not verify_password(data.password, user.password_hash):
            logger.warning(f"⚠️ Failed sign in for {data.email}")
            raise HTTPException(status_code=401, detail="Invalid email or password")

        user.last_login_at = utc_now()
        self.repo.save(self.db, user)
        logger.info(f"✅ User {user.id} signed in")

        return AuthResponse(
            token=create_user_token(user),
            user=UserSummary.from_model(user),
            company=CompanySummary.from_model(user.company),
        )

    def employee_signin(self, data: EmployeeSigninRequest) -> EmployeeAuthResponse:
        login = (data.username or data.email or "").strip()
        if not login or not data.password:
            raise HTTPException(status_code=400, detail="Username and password are required")

        employee = self.repo.get_employee_by_login(self.db, login)
        if not employee or not verify_password(data.password, employee.password_hash):
            logger.warning(f"⚠️ Failed employee sign in for {login}")
            raise HTTPException(status_code=401, detail="Invalid username or password")

        if employee.status != "active":
            raise HTTPException(status_code=403, detail="Your account is inactive. Please contact your employer.")

        logger.info(f"✅ Employee {employee.id} signed in")
        return EmployeeAuthResponse(
            token=create_employee_token(employee),
            employee=EmployeeSummary(
                id=employee.id,
                firstName=employee.first_name,
                lastName=employee.last_name,
                email=employee.email,
                username=employee.username,
                role=employee.role,
                companyId=employee.company_id,
            ),
        )

    async def forgot_password(self, data: ForgotPasswordRequest) -> dict:
        """Always answers the same way so accounts cannot be enumerated"""
        email = (data.email or "").strip().lower()
        if not email:
            raise HTTPException(status_code=400, detail="Email is required")

        user = self.repo.get_user_by_email(self.db, email)
        if user and user.is_active:
            token = generate_timed_token({"userId": user.id, "email": user.email}, salt=RESET_TOKEN_SALT)
            reset_link = f"{FRONTEND_URL}/reset-password?token={token}"
            try:
                await send_password_reset_email(user.email, user.first_name, reset_link)
                logger.info(f"📧 Password reset email sent to user {user.id}")
            except Exception as e:
                logger.error(f"❌ Failed to send password reset email: {e}")
        else:
            logger.info(f"ℹ️ Password reset requested for unknown email {email}")

        return {"message": FORGOT_PASSWORD_MESSAGE}

    def reset_password(self, data: ResetPasswordRequest) -> dict:
        if not data.token or not data.password:
            raise HTTPException(status_code=400, detail="Token and new password are required")

        payload = verify_timed_token(data.token, max_age=PASSWORD_RESET_MAX_AGE, salt=RESET_TOKEN_SALT)
        if not payload:
            raise HTTPException(status_code=400, detail="Invalid or expired reset token")

        problems = check_password_strength(data.password)
        if problems:
            raise HTTPException(status_code=400, detail=problems[0])

        user = self.db.query(User).filter(User.id == payload.get("userId")).first()
        if not user or user.email.lower() != str(payload.get("email", "")).lower():
            raise HTTPException(status_code=400, detail="Invalid or expired reset token")

        user.password_hash = hash_password(data.password)
        self.repo.save(self.db, user)
        logger.info(f"✅ Password reset for user {user.id}")
        return {"message": "Password has been reset successfully"}

    def me(self, user: User) -> MeResponse:
        return MeResponse(user=UserSummary.from_model(user), company=CompanySummary.from_model(user.company))
