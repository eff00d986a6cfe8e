"""Contract router - FastAPI endpoints for contract operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ...auth import get_current_company_user
from ...database import get_db
from ...models import User
from .schemas import (
    ContractCreate,
    ContractDetailResponse,
    ContractPreviewRequest,
    ContractResponse,
    ContractUpdate,
    SendContractRequest,
    SignedDocumentRequest,
    StatusHistoryResponse,
)
from .service import ContractService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contracts", tags=["Contracts"])


def get_contract_service(db: Session = Depends(get_db)) -> ContractService:
    """Dependency injection for ContractService"""
    return ContractService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=list[ContractResponse])
async def get_contracts(
    status: Optional[str] = Query(None, description="Filter by contract status"),
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Get all contracts for the current company, newest first"""
    return service.get_contracts(current_user, status)


@router.post("", response_model=ContractResponse)
async def create_contract(
    data: ContractCreate,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Create a draft contract"""
    return service.create_contract(data, current_user)


@router.get("/{contract_id}", response_model=ContractDetailResponse)
async def get_contract(
    contract_id: str,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Get a contract with its status history"""
    detail = service.get_contract_detail(contract_id, current_user)
    response = ContractDetailResponse.model_validate(detail["contract"])
    response.history = [StatusHistoryResponse.model_validate(entry) for entry in detail["history"]]
    response.pdf_url = detail["pdf_url"]
    response.signed_pdf_url = detail["signed_pdf_url"]
    return response


@router.patch("/{contract_id}", response_model=ContractResponse)
async def update_contract(
    contract_id: str,
    data: ContractUpdate,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Update a draft contract"""
    return service.update_contract(contract_id, data, current_user)


@router.delete("/{contract_id}")
async def delete_contract(
    contract_id: str,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Delete a draft contract"""
    service.delete_contract(contract_id, current_user)
    return {"message": "Contract deleted successfully"}


# ============================================================================
# RENDERING & SIGNING
# ============================================================================


@router.post("/{contract_id}/preview", response_class=HTMLResponse)
async def preview_contract(
    contract_id: str,
    body: ContractPreviewRequest,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Rendered contract HTML, without generating a PDF"""
    return HTMLResponse(content=service.preview_contract(contract_id, body, current_user))


@router.post("/{contract_id}/send")
async def send_contract(
    contract_id: str,
    body: SendContractRequest,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Generate the PDF and signing envelope for a draft contract"""
    result = await service.send_contract(contract_id, body, current_user)
    result["contract"] = ContractResponse.model_validate(result["contract"])
    return result


@router.post("/{contract_id}/signed-document")
async def upload_signed_document(
    contract_id: str,
    body: SignedDocumentRequest,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Store the executed PDF and notify the parties"""
    result = await service.complete_with_signed_document(contract_id, body, current_user)
    result["contract"] = ContractResponse.model_validate(result["contract"])
    return result


@router.post("/{contract_id}/notify-manager")
async def notify_manager(
    contract_id: str,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Ask the company managers to sign a draft"""
    return await service.notify_managers(contract_id, current_user)


@router.post("/{contract_id}/cancel", response_model=ContractResponse)
async def cancel_contract(
    contract_id: str,
    current_user: User = Depends(get_current_company_user),
    service: ContractService = Depends(get_contract_service),
):
    """Cancel a draft or in-flight contract"""
    return service.cancel_contract(contract_id, current_user)
