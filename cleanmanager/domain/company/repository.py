"""Company repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Company, User


class CompanyRepository:
    @staticmethod
    def get_company(db: Session, company_id: int) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def get_admin_users(db: Session, company_id: int) -> list[User]:
        """Active owners and admins, the recipients of office notifications"""
        return (
            db.query(User)
            .filter(
                User.company_id == company_id,
                User.is_active.is_(True),
                User.role.in_(["owner", "admin"]),
            )
            .order_by(User.id.asc())
            .all()
        )

    @staticmethod
    def update_company(db: Session, company: Company, **updates) -> Company:
        for key, value in updates.items():
            if hasattr(company, key):
                setattr(company, key, value)
        db.commit()
        db.refresh(company)
        return company
