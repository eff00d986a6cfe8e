"""Contract domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field


class PropertyInput(BaseModel):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None


class PartyInput(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class ContractTerms(BaseModel):
    contract_type: str = Field("purchase", pattern="^(purchase|assignment|both)$")
    purchase_price: Optional[float] = None
    assignment_fee: Optional[float] = None


class ContractCreate(BaseModel):
    """Schema for creating a new draft contract"""

    template_id: Optional[str] = None  # Company template public ID
    property: PropertyInput = PropertyInput()
    seller: PartyInput = PartyInput()
    buyer: Optional[PartyInput] = None
    contract: ContractTerms = ContractTerms()
    custom_fields: Optional[dict[str, Any]] = None


class ContractUpdate(BaseModel):
    """Schema for updating a draft contract; custom_fields are merged"""

    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    seller_name: Optional[str] = None
    seller_email: Optional[str] = None
    price: Optional[float] = None
    custom_fields: Optional[dict[str, Any]] = None


class ContractPreviewRequest(BaseModel):
    type: str = Field("purchase", pattern="^(purchase|assignment)$")
    clauses: list[str] = []


class SendContractRequest(BaseModel):
    type: str = Field("purchase", pattern="^(purchase|assignment)$")
    clauses: list[str] = []
    seller_name: Optional[str] = None
    seller_email: Optional[str] = None
    seller_phone: Optional[str] = None
    assignee_name: Optional[str] = None
    assignee_email: Optional[str] = None
    assignee_phone: Optional[str] = None


class SignedDocumentRequest(BaseModel):
    """Executed PDF returned by the signing provider"""

    pdf_base64: str
    seller_signed_at: Optional[datetime] = None
    buyer_signed_at: Optional[datetime] = None


class PropertySummary(BaseModel):
    public_id: str
    address: str
    city: str
    state: str
    zip: str
    status: str

    class Config:
        from_attributes = True


class StatusHistoryResponse(BaseModel):
    status: str
    changed_by: Optional[int] = None
    details: Optional[dict] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContractResponse(BaseModel):
    """Schema for contract response"""

    public_id: str
    status: str
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    seller_name: str
    seller_email: str
    price: float
    custom_fields: Optional[dict] = None
    ai_clauses: Optional[list] = None
    signature_layout: Optional[str] = None
    has_pdf: bool = False
    has_signed_pdf: bool = False
    property: Optional[PropertySummary] = None
    sent_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContractDetailResponse(ContractResponse):
    signature_envelope: Optional[dict] = None
    history: list[StatusHistoryResponse] = []
    pdf_url: Optional[str] = None
    signed_pdf_url: Optional[str] = None
