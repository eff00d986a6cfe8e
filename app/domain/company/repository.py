"""Company repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Company, User


class CompanyRepository:
    """Repository for company database operations"""

    @staticmethod
    def get_company(db: Session, company_id: int) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def create_company_for_user(db: Session, user: User, **company_data) -> Company:
        """Create a company and make the user its manager in one transaction"""
        company = Company(**company_data)
        db.add(company)
        db.flush()
        user.company_id = company.id
        user.role = "manager"
        db.commit()
        db.refresh(company)
        db.refresh(user)
        return company

    @staticmethod
    def count_users(db: Session, company_id: int) -> int:
        return db.query(User).filter(User.company_id == company_id).count()

    @staticmethod
    def update_company(db: Session, company: Company, updates: dict) -> Company:
        for key, value in updates.items():
            setattr(company, key, value)
        db.commit()
        db.refresh(company)
        return company
