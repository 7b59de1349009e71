"""Auth domain schemas"""

from typing import Optional

from pydantic import BaseModel, field_validator


class SignupRequest(BaseModel):
    companyName: Optional[str] = None
    companyEmail: Optional[str] = None
    companyPhone: Optional[str] = None
    businessType: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator("companyName", "firstName", "lastName", "email", "companyEmail")
    @classmethod
    def strip_strings(cls, v):
        return v.strip() if isinstance(v, str) else v


class SigninRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class EmployeeSigninRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = None


class CompanySummary(BaseModel):
    id: int
    name: str
    email: str
    subscriptionPlan: Optional[str] = None

    @classmethod
    def from_model(cls, company) -> "CompanySummary":
        return cls(
            id=company.id,
            name=company.name,
            email=company.email,
            subscriptionPlan=company.subscription_plan,
        )


class UserSummary(BaseModel):
    id: int
    email: str
    firstName: str
    lastName: str
    role: Optional[str] = None
    companyId: int

    @classmethod
    def from_model(cls, user) -> "UserSummary":
        return cls(
            id=user.id,
            email=user.email,
            firstName=user.first_name,
            lastName=user.last_name,
            role=user.role,
            companyId=user.company_id,
        )


class AuthResponse(BaseModel):
    token: str
    user: UserSummary
    company: Optional[CompanySummary] = None


class EmployeeSummary(BaseModel):
    id: int
    firstName: str
    lastName: str
    email: str
    username: Optional[str] = None
    role: Optional[str] = None
    companyId: int


class EmployeeAuthResponse(BaseModel):
    token: str
    employee: EmployeeSummary


class MeResponse(BaseModel):
    user: UserSummary
    company: CompanySummary
