"""Billing repository - Database operations for plans, usage and billing cycles"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import BillingCycle, Company, UsageLog, User


class BillingRepository:
    """Repository for billing database operations"""

    @staticmethod
    def get_company(db: Session, company_id: int) -> Optional[Company]:
        """Get company by ID"""
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def count_company_users(db: Session, company_id: int) -> int:
        """Count users that occupy a seat in the company"""
        return db.query(User).filter(User.company_id == company_id).count()

    @staticmethod
    def increment_contract_count(db: Session, company: Company) -> int:
        """Increment the contracts used this period and return the new count"""
        company.contracts_used_this_period = (company.contracts_used_this_period or 0) + 1
        db.commit()
        db.refresh(company)
        return company.contracts_used_this_period

    @staticmethod
    def create_usage_log(
        db: Session,
        company_id: int,
        user_id: Optional[int],
        action_type: str,
        details: Optional[dict] = None,
    ) -> UsageLog:
        """Record a billable or auditable action"""
        log = UsageLog(
            company_id=company_id,
            user_id=user_id,
            action_type=action_type,
            details=details or {},
        )
        db.add(log)
        db.commit()
        db.refresh(log)
        return log

    @staticmethod
    def get_usage_logs(db: Session, company_id: int, action_type: Optional[str] = None) -> list[UsageLog]:
        query = db.query(UsageLog).filter(UsageLog.company_id == company_id)
        if action_type:
            query = query.filter(UsageLog.action_type == action_type)
        return query.order_by(UsageLog.id.desc()).all()

    @staticmethod
    def add_billing_cycle(db: Session, **cycle_data) -> BillingCycle:
        """Stage a closed billing cycle; committed by the caller"""
        cycle = BillingCycle(**cycle_data)
        db.add(cycle)
        return cycle

    @staticmethod
    def get_billing_cycles(db: Session, company_id: int) -> list[BillingCycle]:
        return (
            db.query(BillingCycle)
            .filter(BillingCycle.company_id == company_id)
            .order_by(BillingCycle.cycle_start.desc())
            .all()
        )

    @staticmethod
    def update_company_billing(db: Session, company: Company, **updates) -> Company:
        """Update company billing fields"""
        for key, value in updates.items():
            if value is not None and hasattr(company, key):
                setattr(company, key, value)
        db.commit()
        db.refresh(company)
        return company
