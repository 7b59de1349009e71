import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session, joinedload

from .config import ACCESS_TOKEN_EXPIRE_MINUTES, CUSTOMER_TOKEN_EXPIRE_DAYS
from .database import get_db
from .models import Customer, Employee, User
from .security_utils import create_jwt_token, verify_jwt_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ADMIN_ROLES = {"owner", "admin"}


# ============================================================================
# TOKEN ISSUING
# ============================================================================


def create_user_token(user: User) -> str:
    return create_jwt_token(
        {"sub": str(user.id), "type": "user", "companyId": user.company_id, "role": user.role},
        timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_employee_token(employee: Employee) -> str:
    return create_jwt_token(
        {"sub": str(employee.id), "type": "employee", "companyId": employee.company_id},
        timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_customer_token(customer: Customer) -> str:
    """Customer portal token (7 days by default)"""
    return create_jwt_token(
        {
            "sub": str(customer.id),
            "type": "customer",
            "companyId": customer.company_id,
            "customerId": customer.id,
            "email": customer.email,
        },
        timedelta(days=CUSTOMER_TOKEN_EXPIRE_DAYS),
    )


# ============================================================================
# TOKEN VERIFICATION
# ============================================================================


def _decode_bearer(
    credentials: Optional[HTTPAuthorizationCredentials], expected_type: str
) -> tuple[int, int]:
    """
    Validate the bearer token and its type.

    Returns:
        (subject id, company id)
    """
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authorization token required")

    payload = verify_jwt_token(credentials.credentials)
    if not payload:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if payload.get("type") != expected_type:
        logger.warning(f"⚠️ Token type {payload.get('type')} used where {expected_type} required")
        raise HTTPException(status_code=401, detail="Invalid token type")

    try:
        return int(payload["sub"]), int(payload["companyId"])
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"❌ Token missing claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims") from e


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Back-office user behind the bearer token"""
    user_id, company_id = _decode_bearer(credentials, "user")

    user = (
        db.query(User)
        .options(joinedload(User.company))
        .filter(User.id == user_id, User.company_id == company_id)
        .first()
    )
    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="User not found or inactive")

    logger.debug(f"✅ User authenticated: {user.email}")
    return user


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Owner or admin only"""
    if (user.role or "").lower() not in ADMIN_ROLES:
        logger.warning(f"⚠️ User {user.email} with role {user.role} attempted an admin action")
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


async def get_current_employee(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Employee:
    employee_id, company_id = _decode_bearer(credentials, "employee")

    employee = (
        db.query(Employee)
        .filter(Employee.id == employee_id, Employee.company_id == company_id)
        .first()
    )
    if not employee:
        raise HTTPException(status_code=401, detail="Employee not found")
    if employee.status != "active":
        raise HTTPException(status_code=403, detail="Employee account is inactive")
    return employee


async def get_current_customer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Customer:
    customer_id, company_id = _decode_bearer(credentials, "customer")

    customer = (
        db.query(Customer)
        .filter(Customer.id == customer_id, Customer.company_id == company_id)
        .first()
    )
    if not customer:
        raise HTTPException(status_code=401, detail="Customer not found")
    return customer
