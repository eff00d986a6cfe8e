import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class Company(Base):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(500), nullable=True)
    city = Column(String(255), nullable=True)
    state = Column(String(50), nullable=True)
    zip = Column(String(20), nullable=True)
    signer_name = Column(String(255), nullable=True)  # Defaults to company name on documents

    # Plan the company pays for vs. plan whose limits apply (differ for comped accounts)
    billing_plan = Column(String(20), default="free", nullable=False)
    actual_plan = Column(String(20), default="free", nullable=False)
    billing_interval = Column(String(10), default="monthly", nullable=False)  # monthly, yearly
    billing_period_start = Column(DateTime, nullable=True)
    next_billing_date = Column(DateTime, nullable=True)
    contracts_used_this_period = Column(Integer, default=0, nullable=False)
    subscription_status = Column(
        String(20), default="active", nullable=False
    )  # active, canceling, past_due, cancelled, trialing
    overage_behavior = Column(String(20), default="auto_charge", nullable=False)  # auto_charge, warn_each
    billing_email = Column(String(255), nullable=True)
    trial_ends_at = Column(DateTime, nullable=True)

    # Dodo Payments linkage
    dodo_customer_id = Column(String(255), nullable=True)
    dodo_subscription_id = Column(String(255), nullable=True)
    extra_seats_billed = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    users = relationship("User", back_populates="company")
    properties = relationship("Property", back_populates="company")
    contracts = relationship("Contract", back_populates="company")
    billing_cycles = relationship("BillingCycle", back_populates="company")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    firebase_uid = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    role = Column(String(20), default="user", nullable=False)  # manager, user, admin
    is_active = Column(Boolean, default=True, nullable=False)
    is_system_admin = Column(Boolean, default=False, nullable=False)
    monthly_contract_limit = Column(Integer, nullable=True)  # Per-member cap set by a manager
    created_at = Column(DateTime, server_default=func.now())

    company = relationship("Company", back_populates="users")


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    address = Column(String(500), nullable=False)
    city = Column(String(255), nullable=False)
    state = Column(String(50), nullable=False)
    zip = Column(String(20), nullable=False)
    status = Column(String(20), default="none", nullable=False)  # none, in_escrow, terminated, pending, closed
    created_at = Column(DateTime, server_default=func.now())

    company = relationship("Company", back_populates="properties")
    contracts = relationship("Contract", back_populates="property")


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    template_id = Column(Integer, ForeignKey("company_templates.id", ondelete="SET NULL"), nullable=True)

    buyer_name = Column(String(255), nullable=True)
    buyer_email = Column(String(255), nullable=True)
    seller_name = Column(String(255), nullable=False)
    seller_email = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    status = Column(String(20), default="draft", nullable=False)  # draft, sent, viewed, completed, cancelled

    # Free-form form values used for template interpolation
    custom_fields = Column(JSON, default=dict, nullable=True)
    ai_clauses = Column(JSON, nullable=True)
    signature_layout = Column(String(50), nullable=True)
    # Recipients, signing order and field zones prepared for the signing provider
    signature_envelope = Column(JSON, nullable=True)
    pdf_key = Column(String(500), nullable=True)  # R2 key for the unsigned PDF
    signed_pdf_key = Column(String(500), nullable=True)  # R2 key for the executed PDF

    sent_at = Column(DateTime, nullable=True)
    viewed_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Declared before the relationships: the "property" relationship shadows the builtin below
    @property
    def has_pdf(self) -> bool:
        return bool(self.pdf_key)

    @property
    def has_signed_pdf(self) -> bool:
        return bool(self.signed_pdf_key)

    company = relationship("Company", back_populates="contracts")
    property = relationship("Property", back_populates="contracts")
    history = relationship(
        "ContractStatusHistory",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="ContractStatusHistory.id",
    )


class ContractStatusHistory(Base):
    __tablename__ = "contract_status_history"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    changed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # "metadata" is reserved on declarative classes
    details = Column("metadata", JSON, default=dict, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    contract = relationship("Contract", back_populates="history")


class Invite(Base):
    __tablename__ = "invites"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    token = Column(String(64), unique=True, index=True, nullable=False)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    role = Column(String(20), default="user", nullable=False)
    expires_at = Column(DateTime, nullable=False)
    accepted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class UsageLog(Base):
    __tablename__ = "usage_logs"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    action_type = Column(String(50), nullable=False)  # contract_created, contract_sent, user_added
    details = Column("metadata", JSON, default=dict, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class StateTemplate(Base):
    __tablename__ = "state_templates"

    id = Column(Integer, primary_key=True, index=True)
    state_code = Column(String(10), unique=True, index=True, nullable=False)  # "CA", "TX", "GENERAL"
    purchase_agreement_html = Column(Text, nullable=True)
    assignment_contract_html = Column(Text, nullable=True)
    is_purchase_customized = Column(Boolean, default=False, nullable=False)
    is_assignment_customized = Column(Boolean, default=False, nullable=False)
    use_general_template = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class CompanyTemplate(Base):
    __tablename__ = "company_templates"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    company_id = Column(
        Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True
    )  # NULL for example templates
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    tags = Column(JSON, default=list, nullable=True)
    html_content = Column(Text, nullable=False)
    signature_layout = Column(String(50), default="two-column", nullable=False)
    custom_fields = Column(JSON, default=list, nullable=True)
    used_placeholders = Column(JSON, default=list, nullable=True)
    field_config = Column(JSON, nullable=True)
    is_example = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class BillingCycle(Base):
    __tablename__ = "billing_cycles"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    cycle_start = Column(DateTime, nullable=False)
    cycle_end = Column(DateTime, nullable=False)
    plan_at_cycle_start = Column(String(20), nullable=False)
    base_amount = Column(Integer, default=0, nullable=False)  # cents
    extra_seats_count = Column(Integer, default=0, nullable=False)
    extra_seats_amount = Column(Integer, default=0, nullable=False)
    extra_contracts_count = Column(Integer, default=0, nullable=False)
    extra_contracts_amount = Column(Integer, default=0, nullable=False)
    total_amount = Column(Integer, default=0, nullable=False)
    status = Column(String(20), default="pending", nullable=False)  # pending, paid, failed
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    company = relationship("Company", back_populates="billing_cycles")


class SupportTicket(Base):
    __tablename__ = "support_tickets"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    company_id = Column(Integer, ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    category = Column(String(50), default="general", nullable=False)
    status = Column(String(20), default="open", nullable=False)  # open, resolved
    created_at = Column(DateTime, server_default=func.now())
