"""Contract repository - Database operations for contracts, properties and templates"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from ...models import (
    Company,
    CompanyTemplate,
    Contract,
    ContractStatusHistory,
    Property,
    StateTemplate,
    User,
)


class ContractRepository:
    """Repository for contract database operations"""

    @staticmethod
    def get_contracts(db: Session, company_id: int, status: Optional[str] = None) -> list[Contract]:
        """Get all contracts for a company, newest first"""
        query = db.query(Contract).options(joinedload(Contract.property)).filter(Contract.company_id == company_id)
        if status:
            query = query.filter(Contract.status == status)
        return query.order_by(Contract.created_at.desc(), Contract.id.desc()).all()

    @staticmethod
    def get_contract_by_public_id(db: Session, public_id: str, company_id: int) -> Optional[Contract]:
        """Get a contract by public UUID, scoped to the company"""
        return (
            db.query(Contract)
            .options(joinedload(Contract.property))
            .filter(Contract.public_id == public_id, Contract.company_id == company_id)
            .first()
        )

    @staticmethod
    def create_contract(db: Session, **contract_data) -> Contract:
        contract = Contract(**contract_data)
        db.add(contract)
        db.flush()
        return contract

    @staticmethod
    def delete_contract(db: Session, contract: Contract) -> None:
        db.delete(contract)
        db.commit()

    @staticmethod
    def add_status_history(
        db: Session,
        contract_id: int,
        status: str,
        changed_by: Optional[int],
        details: Optional[dict] = None,
    ) -> ContractStatusHistory:
        """Stage a status history row; committed by the caller"""
        entry = ContractStatusHistory(
            contract_id=contract_id,
            status=status,
            changed_by=changed_by,
            details=details or {},
        )
        db.add(entry)
        return entry

    @staticmethod
    def get_status_history(db: Session, contract_id: int) -> list[ContractStatusHistory]:
        return (
            db.query(ContractStatusHistory)
            .filter(ContractStatusHistory.contract_id == contract_id)
            .order_by(ContractStatusHistory.id)
            .all()
        )

    # ========================================================================
    # Properties
    # ========================================================================

    @staticmethod
    def find_property(db: Session, company_id: int, address: str, city: str, state: str) -> Optional[Property]:
        return (
            db.query(Property)
            .filter(
                Property.company_id == company_id,
                Property.address == address,
                Property.city == city,
                Property.state == state,
            )
            .first()
        )

    @staticmethod
    def find_or_create_property(
        db: Session, company_id: int, address: str, city: str, state: str, zip_code: str
    ) -> Property:
        """Properties are unique per company by (address, city, state)"""
        existing = ContractRepository.find_property(db, company_id, address, city, state)
        if existing:
            return existing

        prop = Property(company_id=company_id, address=address, city=city, state=state, zip=zip_code)
        db.add(prop)
        db.flush()
        return prop

    # ========================================================================
    # Templates
    # ========================================================================

    @staticmethod
    def _usable_templates(db: Session, company_id: Optional[int]):
        """Active templates the company owns, plus example templates"""
        ownership = CompanyTemplate.is_example.is_(True)
        if company_id is not None:
            ownership = or_(CompanyTemplate.company_id == company_id, ownership)
        return db.query(CompanyTemplate).filter(CompanyTemplate.is_active.is_(True), ownership)

    @staticmethod
    def get_contract_template(db: Session, template_id: int, company_id: Optional[int]) -> Optional[CompanyTemplate]:
        """Template a contract was created from. Soft-deleted templates still resolve."""
        ownership = CompanyTemplate.is_example.is_(True)
        if company_id is not None:
            ownership = or_(CompanyTemplate.company_id == company_id, ownership)
        return db.query(CompanyTemplate).filter(CompanyTemplate.id == template_id, ownership).first()

    @staticmethod
    def get_usable_company_template_by_public_id(
        db: Session, public_id: str, company_id: int
    ) -> Optional[CompanyTemplate]:
        return (
            ContractRepository._usable_templates(db, company_id)
            .filter(CompanyTemplate.public_id == public_id)
            .first()
        )

    @staticmethod
    def get_state_template(db: Session, state_code: str) -> Optional[StateTemplate]:
        return db.query(StateTemplate).filter(StateTemplate.state_code == state_code).first()

    # ========================================================================
    # Company
    # ========================================================================

    @staticmethod
    def get_company(db: Session, company_id: int) -> Optional[Company]:
        return db.query(Company).filter(Company.id == company_id).first()

    @staticmethod
    def get_company_managers(db: Session, company_id: int) -> list[User]:
        return (
            db.query(User)
            .filter(
                User.company_id == company_id,
                User.role.in_(["manager", "admin"]),
                User.is_active.is_(True),
            )
            .all()
        )
