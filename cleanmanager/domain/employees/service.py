"""Employee service - Business logic for staff management"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_employee_credentials_email
from ...models import Employee, User
from ...security_utils import generate_employee_password, hash_password, sanitize_text
from ...shared.validators import UK_PHONE_ERROR, format_uk_phone, is_valid_email, is_valid_uk_phone
from ...utils.dates import utc_now
from ..event_log.service import log_event
from .repository import EmployeeRepository
from .schemas import EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)

PAY_TYPES = ("hourly", "per_job", "salary")
EMPLOYEE_STATUSES = ("active", "inactive")

FIELD_MAP = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "address": "address",
    "city": "city",
    "postcode": "postcode",
    "country": "country",
    "role": "role",
    "employmentType": "employment_type",
    "startDate": "start_date",
    "payType": "pay_type",
    "hourlyRate": "hourly_rate",
    "salary": "salary",
    "paymentFrequency": "payment_frequency",
    "notes": "notes",
}


class EmployeeService:
    """Service layer for employee business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = EmployeeRepository()

    def get_employees(self, user: User, status: Optional[str] = None) -> list[Employee]:
        return self.repo.get_employees(self.db, user.company_id, status)

    def get_employee(self, employee_id: int, user: User) -> Employee:
        employee = self.repo.get_employee_by_id(self.db, employee_id, user.company_id)
        if not employee:
            raise HTTPException(status_code=404, detail="Employee not found")
        return employee

    @staticmethod
    def _validate_pay(values: dict) -> None:
        pay_type = values.get("pay_type") or "hourly"
        if pay_type not in PAY_TYPES:
            raise HTTPException(status_code=400, detail="Pay type must be hourly, per_job or salary")
        if pay_type == "hourly" and values.get("hourly_rate") is None:
            raise HTTPException(status_code=400, detail="Hourly rate is required for hourly employees")
        if pay_type == "salary" and values.get("salary") is None:
            raise HTTPException(status_code=400, detail="Salary is required for salaried employees")
        for column in ("hourly_rate", "salary"):
            if values.get(column) is not None and values[column] < 0:
                raise HTTPException(status_code=400, detail="Pay amounts cannot be negative")

    def _validate_contact(self, values: dict, user: User, exclude_id: Optional[int] = None) -> None:
        values["email"] = values["email"].strip().lower()
        if not is_valid_email(values["email"]):
            raise HTTPException(status_code=400, detail="Invalid email format")
        if not is_valid_uk_phone(values["phone"]):
            raise HTTPException(status_code=400, detail=UK_PHONE_ERROR)
        values["phone"] = format_uk_phone(values["phone"])

        if self.repo.email_used_by_company_account(self.db, user.company, values["email"]):
            raise HTTPException(
                status_code=400,
                detail="Employee email must be different from the company email and admin account emails",
            )

        duplicate = self.repo.find_duplicate(
            self.db, user.company_id, values["email"], values["phone"], exclude_id=exclude_id
        )
        if duplicate == "email":
            raise HTTPException(status_code=409, detail="An employee with this email already exists")
        if duplicate == "phone":
            raise HTTPException(status_code=409, detail="An employee with this phone number already exists")

    def create_employee(self, data: EmployeeCreate, user: User) -> tuple[Employee, str]:
        """
        Create an employee with a generated password.

        Returns:
            (employee, plain password) - the plain password is only ever returned here
        """
        logger.info(f"📥 Creating employee for company_id: {user.company_id}")
        values = {column: getattr(data, field) for field, column in FIELD_MAP.items()}
        for key, value in values.items():
            if isinstance(value, str):
                values[key] = value.strip()

        required = ("first_name", "last_name", "email", "phone", "address", "city", "postcode", "country")
        if not all(values.get(column) for column in required):
            raise HTTPException(
                status_code=400,
                detail="First name, last name, email, phone and full address are required",
            )
        if not values.get("role") or not values.get("employment_type"):
            raise HTTPException(status_code=400, detail="Role and employment type are required")
        if not values.get("start_date"):
            raise HTTPException(status_code=400, detail="Start date is required")
        if values["start_date"] < utc_now().date():
            raise HTTPException(status_code=400, detail="Start date cannot be in the past")

        values["pay_type"] = values.get("pay_type") or "hourly"
        self._validate_pay(values)
        self._validate_contact(values, user)

        company = user.company
        if company.max_employees and self.repo.count_employees(self.db, company.id) >= company.max_employees:
            logger.warning(f"⚠️ Company {company.id} reached employee limit {company.max_employees}")
            raise HTTPException(
                status_code=403,
                detail=f"Employee limit reached ({company.max_employees}). Upgrade your plan to add more staff.",
            )

        username = values["email"]
        if self.repo.username_taken(self.db, username):
            raise HTTPException(status_code=409, detail="An employee account with this email already exists")

        values["notes"] = sanitize_text(values.get("notes"), 2000)
        plain_password = generate_employee_password()
        employee = self.repo.create_employee(
            self.db,
            user.company_id,
            **values,
            username=username,
            password_hash=hash_password(plain_password),
            status="active",
        )
        log_event(
            self.db,
            user.company_id,
            "employee_created",
            entity_type="employee",
            entity_id=employee.id,
            description=f"Employee {employee.full_name} added",
            user_id=user.id,
        )
        self.db.commit()
        logger.info(f"✅ Employee {employee.id} created")
        return employee, plain_password

    def update_employee(self, employee_id: int, data: EmployeeUpdate, user: User) -> Employee:
        employee = self.get_employee(employee_id, user)

        updates = {}
        for field, column in FIELD_MAP.items():
            if field in data.model_fields_set:
                value = getattr(data, field)
                updates[column] = value.strip() if isinstance(value, str) else value

        for column in ("first_name", "last_name", "email", "phone"):
            if column in updates and not updates[column]:
                raise HTTPException(status_code=400, detail=f"{column.replace('_', ' ').capitalize()} cannot be empty")

        if "status" in data.model_fields_set:
            if data.status not in EMPLOYEE_STATUSES:
                raise HTTPException(status_code=400, detail="Status must be 'active' or 'inactive'")
            updates["status"] = data.status

        merged = {
            "email": updates.get("email", employee.email),
            "phone": updates.get("phone", employee.phone),
            "pay_type": updates.get("pay_type", employee.pay_type),
            "hourly_rate": updates.get("hourly_rate", employee.hourly_rate),
            "salary": updates.get("salary", employee.salary),
        }
        self._validate_pay(merged)
        if "email" in updates or "phone" in updates:
            self._validate_contact(merged, user, exclude_id=employee.id)
            updates["phone"] = merged["phone"]
            if "email" in updates:
                updates["email"] = merged["email"]
                if self.repo.username_taken(self.db, merged["email"], exclude_id=employee.id):
                    raise HTTPException(status_code=409, detail="An employee account with this email already exists")
                updates["username"] = merged["email"]

        if "notes" in updates:
            updates["notes"] = sanitize_text(updates["notes"], 2000)

        logger.info(f"📥 Updating employee {employee.id}: {sorted(updates)}")
        return self.repo.update_employee(self.db, employee, **updates)

    def delete_employee(self, employee_id: int, user: User) -> dict:
        employee = self.get_employee(employee_id, user)

        active_jobs = self.repo.count_active_jobs(self.db, employee.id, user.company_id)
        if active_jobs:
            raise HTTPException(
                status_code=409,
                detail=(
                    f"Cannot delete employee. They have {active_jobs} pending or in-progress job(s). "
                    "Please reassign or complete these jobs first."
                ),
            )

        name = employee.full_name
        self.repo.delete_employee(self.db, employee)
        log_event(
            self.db,
            user.company_id,
            "employee_deleted",
            entity_type="employee",
            entity_id=employee_id,
            description=f"Employee {name} deleted",
            user_id=user.id,
        )
        self.db.commit()
        logger.info(f"✅ Employee {employee_id} deleted")
        return {"message": "Employee deleted successfully"}

    async def send_credentials(self, employee_id: int, user: User) -> dict:
        """Issue a fresh password and email it to the employee"""
        employee = self.get_employee(employee_id, user)
        if not employee.username:
            employee.username = employee.email.lower()

        plain_password = generate_employee_password()
        self.repo.update_employee(self.db, employee, password_hash=hash_password(plain_password))

        try:
            await send_employee_credentials_email(
                to=employee.email,
                employee_name=employee.first_name,
                company_name=user.company.name,
                username=employee.username,
                password=plain_password,
            )
        except Exception as e:
            logger.error(f"❌ Failed to send credentials to employee {employee.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send credentials email") from e

        logger.info(f"📧 Credentials sent to employee {employee.id}")
        return {"message": f"Login credentials sent to {employee.email}"}
