"""Auth repository - account lookups and creation"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Company, Employee, User


class AuthRepository:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(func.lower(User.email) == email.lower()).first()

    @staticmethod
    def get_company_by_email(db: Session, email: str) -> Optional[Company]:
        return db.query(Company).filter(func.lower(Company.email) == email.lower()).first()

    @staticmethod
    def get_employee_by_login(db: Session, login: str) -> Optional[Employee]:
        """Employees sign in with their username or email"""
        login = login.lower()
        return (
            db.query(Employee)
            .filter(or_(func.lower(Employee.username) == login, func.lower(Employee.email) == login))
            .order_by(Employee.id.asc())
            .first()
        )

    @staticmethod
    def create_company_with_admin(db: Session, company_data: dict, user_data: dict) -> tuple[Company, User]:
        """Create a company and its first admin in one transaction"""
        company = Company(**company_data)
        db.add(company)
        db.flush()

        user = User(company_id=company.id, **user_data)
        db.add(user)
        db.commit()
        db.refresh(company)
        db.refresh(user)
        return company, user

    @staticmethod
    def save(db: Session, instance) -> None:
        db.commit()
        db.refresh(instance)
