"""Contract service - Business logic for contract operations"""

import base64
import binascii
import logging
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import FRONTEND_URL
from ...email_service import send_manager_signature_request_email, send_signed_contract_email
from ...models import Company, Contract, User
from ...plans import can_create_contract, format_price, get_plan
from ...storage import contract_pdf_key, generate_presigned_url, upload_pdf_to_r2
from ...utils.sanitization import sanitize_dict, sanitize_string
from ..ai.clauses import generate_clauses
from ..billing.dodo_service import dodo_service
from ..billing.enforcement import PlanEnforcementService, roll_billing_period
from ..billing.repository import BillingRepository
from .pdf_service import ContractPDFService
from .repository import ContractRepository
from .schemas import (
    ContractCreate,
    ContractPreviewRequest,
    ContractUpdate,
    SendContractRequest,
    SignedDocumentRequest,
)
from .signature_layouts import get_signature_positions

logger = logging.getLogger(__name__)

# Image data URLs are stored verbatim
RAW_CUSTOM_FIELDS = {"buyer_signature", "buyer_initials"}

# Custom field keys forwarded to the template renderer
RENDER_FIELDS = (
    "apn", "seller_address", "earnest_money",
    "escrow_agent_name", "escrow_agent_address", "escrow_officer", "escrow_agent_email",
    "close_of_escrow", "inspection_period", "personal_property", "additional_terms",
    "escrow_fees_split", "title_policy_paid_by", "hoa_fees_split",
    "company_name", "company_signer_name", "company_email", "company_phone",
    "buyer_signature", "buyer_initials", "assignment_fee",
)  # fmt: skip

CANCELLABLE_STATUSES = ("draft", "sent", "viewed")
SIGNABLE_STATUSES = ("sent", "viewed")

CONTRACT_TITLES = {"purchase": "Purchase Agreement", "assignment": "Assignment Contract"}


def get_missing_buyer_fields(custom_fields: Optional[dict], is_three_party: bool) -> list[str]:
    """Buyer-side signing fields that must be saved before a contract is sent"""
    fields = custom_fields or {}
    required = [
        ("company_name", "Company Name"),
        ("company_signer_name", "Signer Name"),
        ("company_email", "Company Email"),
        ("company_phone", "Company Phone"),
        ("buyer_signature", "Buyer Signature"),
    ]
    # The wholesaler does not initial three-party assignments
    if not is_three_party:
        required.append(("buyer_initials", "Buyer Initials"))
    return [label for key, label in required if not fields.get(key)]


def build_signing_envelope(
    contract_public_id: str,
    send_type: str,
    property_address: str,
    signature_layout: Optional[str],
    positions: list[dict],
    seller: dict,
    assignee: dict,
) -> dict:
    """
    Recipients, signing order and field zones for the signing provider.
    Three-party contracts with an assignee email are signed seller first, then assignee.
    """
    is_three_party = signature_layout == "three-party"

    recipients = [{"name": seller["name"], "email": seller["email"], "role": "SIGNER", "signing_order": 1}]
    if is_three_party and assignee.get("email"):
        recipients.append(
            {
                "name": assignee.get("name") or "Buyer",
                "email": assignee["email"],
                "role": "SIGNER",
                "signing_order": 2,
            }
        )

    fields = []
    for position in positions:
        email = seller["email"] if position["recipient_role"] == "seller" else assignee.get("email") or ""
        if not email:
            continue
        fields.append(
            {
                "page": position["page"],
                "x": position["x"],
                "y": position["y"],
                "width": position["width"],
                "height": position["height"],
                "recipient_email": email,
                "field_type": position["field_type"],
            }
        )

    return {
        "external_id": f"contract::{contract_public_id}::{send_type}",
        "title": f"{CONTRACT_TITLES[send_type]} - {property_address}",
        "signing_order": "SEQUENTIAL" if any(r["signing_order"] > 1 for r in recipients) else "PARALLEL",
        "signature_layout": signature_layout,
        "recipients": recipients,
        "fields": fields,
    }


class ContractService:
    """Service layer for contract business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContractRepository()
        self.billing_repo = BillingRepository()
        self.enforcement = PlanEnforcementService(db)

    def get_contracts(self, user: User, status: Optional[str] = None) -> list[Contract]:
        return self.repo.get_contracts(self.db, user.company_id, status)

    def get_contract(self, public_id: str, user: User) -> Contract:
        """Get a contract of the user's company"""
        contract = self.repo.get_contract_by_public_id(self.db, public_id, user.company_id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        return contract

    def get_contract_detail(self, public_id: str, user: User) -> dict:
        contract = self.get_contract(public_id, user)
        detail = {
            "contract": contract,
            "history": self.repo.get_status_history(self.db, contract.id),
            "pdf_url": None,
            "signed_pdf_url": None,
        }
        for key, url_field in ((contract.pdf_key, "pdf_url"), (contract.signed_pdf_key, "signed_pdf_url")):
            if not key:
                continue
            try:
                detail[url_field] = generate_presigned_url(key)
            except Exception as e:
                logger.warning(f"⚠️ Failed to generate presigned URL for {key}: {e}")
        return detail

    # ========================================================================
    # Drafts
    # ========================================================================

    def create_contract(self, data: ContractCreate, user: User) -> Contract:
        """Create a draft contract, finding or creating its property"""
        prop = data.property
        if not (prop.address and prop.city and prop.state and prop.zip):
            raise HTTPException(status_code=400, detail="Property details are required")
        if not (data.seller.name and data.seller.email):
            raise HTTPException(status_code=400, detail="Seller details are required")
        if not data.contract.purchase_price:
            raise HTTPException(status_code=400, detail="Purchase price is required")

        enforcement = self.enforcement.check_contract_creation(user.company_id)
        if not enforcement.allowed:
            raise HTTPException(
                status_code=403,
                detail={
                    "error": enforcement.reason or "Contract limit reached",
                    "upgrade_required": enforcement.upgrade_required,
                    "suggested_plan": enforcement.suggested_plan,
                },
            )
        if enforcement.overage_price:
            logger.info(f"⚠️ Overage contract for company {user.company_id}: {enforcement.overage_price} cents")

        template = None
        if data.template_id:
            template = self.repo.get_usable_company_template_by_public_id(
                self.db, data.template_id, user.company_id
            )
            if not template:
                raise HTTPException(
                    status_code=400,
                    detail="Selected template not found or does not belong to your company.",
                )

        address = sanitize_string(prop.address)
        city = sanitize_string(prop.city)
        state = sanitize_string(prop.state)
        zip_code = sanitize_string(prop.zip)
        property_row = self.repo.find_or_create_property(self.db, user.company_id, address, city, state, zip_code)

        buyer = data.buyer
        extra = sanitize_dict(data.custom_fields or {}, skip=RAW_CUSTOM_FIELDS)
        custom_fields = {
            **extra,
            "buyer_phone": buyer.phone if buyer else None,
            "seller_phone": data.seller.phone,
            "assignment_fee": data.contract.assignment_fee or 0,
            "contract_type": data.contract.contract_type,
            "property_address": address,
            "property_city": city,
            "property_state": state,
            "property_zip": zip_code,
        }

        contract = self.repo.create_contract(
            self.db,
            company_id=user.company_id,
            property_id=property_row.id,
            created_by=user.id,
            template_id=template.id if template else None,
            buyer_name=sanitize_string(buyer.name) if buyer and buyer.name else "",
            buyer_email=(buyer.email or "").strip() if buyer else "",
            seller_name=sanitize_string(data.seller.name),
            seller_email=data.seller.email.strip(),
            price=data.contract.purchase_price,
            status="draft",
            custom_fields=custom_fields,
            signature_layout=template.signature_layout if template else None,
        )
        self.repo.add_status_history(self.db, contract.id, "draft", user.id, {"action": "created"})
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"✅ Created contract {contract.public_id} for company {user.company_id}")

        new_count = self.enforcement.increment_contract_count(user.company_id)
        logger.info(f"📝 Contract count for company {user.company_id} is now {new_count}")

        self.enforcement.log_usage(
            user.company_id,
            user.id,
            "contract_created",
            {
                "contract_id": contract.public_id,
                "contract_type": data.contract.contract_type,
                "has_overage": bool(enforcement.overage_price),
            },
        )
        return contract

    def update_contract(self, public_id: str, data: ContractUpdate, user: User) -> Contract:
        contract = self.get_contract(public_id, user)
        if contract.status != "draft":
            raise HTTPException(status_code=400, detail="Only draft contracts can be edited")

        if data.buyer_name is not None:
            contract.buyer_name = sanitize_string(data.buyer_name)
        if data.buyer_email is not None:
            contract.buyer_email = data.buyer_email.strip()
        if data.seller_name is not None:
            contract.seller_name = sanitize_string(data.seller_name)
        if data.seller_email is not None:
            contract.seller_email = data.seller_email.strip()
        if data.price is not None:
            contract.price = data.price
        if data.custom_fields:
            # Reassign so the JSON column is flagged dirty
            contract.custom_fields = {
                **(contract.custom_fields or {}),
                **sanitize_dict(data.custom_fields, skip=RAW_CUSTOM_FIELDS),
            }

        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"🔄 Updated contract {contract.public_id}")
        return contract

    def delete_contract(self, public_id: str, user: User) -> None:
        contract = self.get_contract(public_id, user)
        if contract.status != "draft":
            raise HTTPException(status_code=400, detail="Only draft contracts can be deleted")
        self.repo.delete_contract(self.db, contract)
        logger.info(f"🗑️ Deleted draft contract {public_id}")

    def cancel_contract(self, public_id: str, user: User) -> Contract:
        contract = self.get_contract(public_id, user)
        if contract.status not in CANCELLABLE_STATUSES:
            raise HTTPException(status_code=400, detail=f"Cannot cancel a {contract.status} contract")

        previous = contract.status
        contract.status = "cancelled"
        self.repo.add_status_history(
            self.db, contract.id, "cancelled", user.id, {"action": "cancelled", "previous_status": previous}
        )
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"📝 Cancelled contract {public_id} (was {previous})")
        return contract

    async def notify_managers(self, public_id: str, user: User) -> dict:
        """Email the company managers that a draft needs their signature"""
        contract = self.get_contract(public_id, user)
        if contract.status != "draft":
            raise HTTPException(status_code=400, detail="Contract has already been signed or sent")

        managers = self.repo.get_company_managers(self.db, user.company_id)
        if not managers:
            raise HTTPException(status_code=400, detail="No managers found in your company")
        recipients = [m.email for m in managers if m.email]
        if not recipients:
            raise HTTPException(status_code=400, detail="No manager email addresses found")

        fields = contract.custom_fields or {}
        prop = contract.property
        address_parts = [
            fields.get("property_address") or (prop.address if prop else None) or "Unknown Property",
            fields.get("property_city") or (prop.city if prop else None),
            fields.get("property_state") or (prop.state if prop else None),
        ]
        full_address = ", ".join(part for part in address_parts if part)
        price = contract.price or 0
        price_display = f"${price:,.0f}" if float(price).is_integer() else f"${price:,.2f}"

        try:
            await send_manager_signature_request_email(
                recipients,
                requester_name=user.full_name or user.email or "A team member",
                property_address=full_address,
                seller_name=contract.seller_name,
                price_display=price_display,
                contract_url=f"{FRONTEND_URL}/dashboard/contracts/{contract.public_id}",
            )
        except Exception as e:
            logger.error(f"❌ Failed to send manager notification for contract {public_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send notification email") from e

        logger.info(f"📧 Notified {len(recipients)} manager(s) about contract {public_id}")
        return {"success": True, "message": f"Notification sent to {len(recipients)} manager(s)"}

    # ========================================================================
    # Rendering
    # ========================================================================

    def _is_three_party(self, contract: Contract) -> bool:
        if not contract.template_id:
            return False
        template = self.repo.get_contract_template(self.db, contract.template_id, contract.company_id)
        return bool(template and template.signature_layout == "three-party")

    @staticmethod
    def build_contract_data(
        contract: Contract,
        company: Optional[Company],
        overrides: Optional[SendContractRequest] = None,
        ai_clauses_html: str = "",
    ) -> dict:
        """Template data for a contract; signer overrides fall back to the saved contract values"""
        fields = contract.custom_fields or {}
        prop = contract.property

        seller_name = (overrides and overrides.seller_name) or contract.seller_name
        seller_email = (overrides and overrides.seller_email) or contract.seller_email
        seller_phone = (overrides and overrides.seller_phone) or fields.get("seller_phone") or ""
        assignee_name = (overrides and overrides.assignee_name) or contract.buyer_name
        assignee_email = (overrides and overrides.assignee_email) or contract.buyer_email
        assignee_phone = (overrides and overrides.assignee_phone) or fields.get("buyer_phone") or ""

        data = {key: fields.get(key) for key in RENDER_FIELDS}
        data.update(
            {
                "property_address": fields.get("property_address") or (prop.address if prop else ""),
                "property_city": fields.get("property_city") or (prop.city if prop else ""),
                "property_state": fields.get("property_state") or (prop.state if prop else ""),
                "property_zip": fields.get("property_zip") or (prop.zip if prop else ""),
                "seller_name": seller_name or "",
                "seller_email": seller_email or "",
                "seller_phone": seller_phone,
                "buyer_name": assignee_name,
                "buyer_email": assignee_email,
                "buyer_phone": assignee_phone,
                "assignee_name": assignee_name,
                "assignee_email": assignee_email,
                "assignee_phone": assignee_phone,
                "purchase_price": contract.price or 0,
                "ai_clauses": ai_clauses_html,
            }
        )
        if company:
            data.update(
                {
                    "company_address": company.address,
                    "company_city": company.city,
                    "company_state": company.state,
                    "company_zip": company.zip,
                }
            )
        return data

    def preview_contract(self, public_id: str, body: ContractPreviewRequest, user: User) -> str:
        """HTML preview of the contract as it would be sent"""
        contract = self.get_contract(public_id, user)
        company = self.repo.get_company(self.db, user.company_id)
        ai_clauses_html = generate_clauses(body.clauses) if body.clauses else ""
        data = self.build_contract_data(contract, company, ai_clauses_html=ai_clauses_html)

        template_html, signature_layout = ContractPDFService.load_template(
            self.db, body.type, data.get("property_state"), contract.template_id, user.company_id
        )
        return ContractPDFService.build_html(template_html, data, signature_layout)

    # ========================================================================
    # Signing
    # ========================================================================

    async def send_contract(self, public_id: str, body: SendContractRequest, user: User) -> dict:
        """
        Render the contract PDF, prepare the signing envelope and store the PDF.
        Overage contracts are charged to the company's subscription.
        """
        company = self.repo.get_company(self.db, user.company_id)
        if not company:
            raise HTTPException(status_code=404, detail="Company not found")
        roll_billing_period(self.db, company)

        if company.subscription_status == "past_due":
            raise HTTPException(
                status_code=402,
                detail={
                    "error": (
                        "Your payment is past due. Please update your payment method to continue "
                        "sending contracts."
                    ),
                    "payment_required": True,
                },
            )

        actual_plan = company.actual_plan or "free"
        limit_check = can_create_contract(actual_plan, company.contracts_used_this_period or 0)
        if not limit_check.allowed and not limit_check.is_overage:
            raise HTTPException(
                status_code=403,
                detail={
                    "error": limit_check.reason or "Contract limit reached. Please upgrade your plan.",
                    "requires_upgrade": True,
                },
            )
        is_overage = limit_check.is_overage

        contract = self.get_contract(public_id, user)
        if contract.status != "draft":
            raise HTTPException(status_code=400, detail="Contract has already been sent")

        missing = get_missing_buyer_fields(contract.custom_fields, self._is_three_party(contract))
        if missing:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Missing required buyer signing fields: {', '.join(missing)}. "
                    "Please complete all buyer information before sending."
                ),
            )

        ai_clauses_html = generate_clauses(body.clauses) if body.clauses else ""
        data = self.build_contract_data(contract, company, body, ai_clauses_html)
        logger.info(
            f"📝 Sending contract {public_id} ({body.type}) to {data['seller_email']}, "
            f"assignee {data['assignee_email'] or 'none'}"
        )

        try:
            pdf_bytes, signature_layout = await ContractPDFService.generate_contract_pdf(
                self.db, body.type, data, contract.template_id, user.company_id
            )
        except Exception as e:
            logger.error(f"❌ PDF generation failed for contract {public_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to generate contract PDF") from e

        page_count = ContractPDFService.get_page_count(pdf_bytes)
        positions = get_signature_positions(page_count, signature_layout)
        is_three_party = signature_layout == "three-party"

        if not any(p["recipient_role"] == "seller" for p in positions):
            raise HTTPException(
                status_code=500,
                detail="No seller signature fields found. Please check template configuration.",
            )
        if is_three_party and not any(p["recipient_role"] == "buyer" for p in positions):
            raise HTTPException(
                status_code=500,
                detail="Three-party template requires buyer signature fields. Please check template configuration.",
            )
        invalid_pages = [p["page"] for p in positions if p["page"] < 1 or p["page"] > page_count]
        if invalid_pages:
            raise HTTPException(
                status_code=500,
                detail=(
                    f"Signature fields on invalid pages (PDF has {page_count} pages but fields reference "
                    f"pages: {', '.join(str(p) for p in invalid_pages)})"
                ),
            )

        envelope = build_signing_envelope(
            contract.public_id,
            body.type,
            data["property_address"],
            signature_layout,
            positions,
            seller={"name": data["seller_name"], "email": data["seller_email"]},
            assignee={"name": data["assignee_name"], "email": data["assignee_email"]},
        )
        envelope["page_count"] = page_count

        try:
            pdf_key = upload_pdf_to_r2(pdf_bytes, contract_pdf_key(company.public_id, contract.public_id))
        except Exception as e:
            logger.error(f"❌ Failed to store PDF for contract {public_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to store contract PDF") from e

        contract.status = "sent"
        contract.sent_at = datetime.utcnow()
        contract.signature_envelope = envelope
        contract.signature_layout = signature_layout
        contract.ai_clauses = list(body.clauses)
        contract.pdf_key = pdf_key
        self.repo.add_status_history(
            self.db,
            contract.id,
            "sent",
            user.id,
            {
                "action": "sent_for_signing",
                "send_type": body.type,
                "external_id": envelope["external_id"],
                "recipients": [r["email"] for r in envelope["recipients"]],
                "ai_clauses_used": list(body.clauses),
                "three_party": is_three_party,
            },
        )
        self.db.commit()
        self.db.refresh(contract)

        self.billing_repo.increment_contract_count(self.db, company)

        overage_price = get_plan(actual_plan).limits.overage_pricing.extra_contract_price
        overage_charged = False
        if is_overage and company.dodo_subscription_id and dodo_service.is_available():
            try:
                await dodo_service.charge_subscription(company.dodo_subscription_id, overage_price)
                overage_charged = True
                logger.info(f"✅ Charged overage contract for company {company.id}")
            except Exception as e:
                logger.error(f"❌ Overage charge failed for company {company.id}: {e}")

        self.enforcement.log_usage(
            company.id,
            user.id,
            "contract_sent",
            {"contract_id": contract.public_id, "send_type": body.type, "is_overage": is_overage},
        )
        logger.info(f"✅ Contract {public_id} prepared for signing ({page_count} pages)")

        return {
            "success": True,
            "contract": contract,
            "envelope": envelope,
            "billing": {
                "is_overage": is_overage,
                "overage_charged": overage_charged,
                "overage_amount": format_price(overage_price) if is_overage else None,
            },
        }

    async def complete_with_signed_document(
        self, public_id: str, body: SignedDocumentRequest, user: User
    ) -> dict:
        """Store the executed PDF with signing dates stamped and email the signed copy"""
        contract = self.get_contract(public_id, user)
        if contract.status not in SIGNABLE_STATUSES:
            raise HTTPException(status_code=400, detail="Only sent contracts can be completed")

        try:
            pdf_bytes = base64.b64decode(body.pdf_base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise HTTPException(status_code=400, detail="Invalid PDF data") from e
        if not pdf_bytes.startswith(b"%PDF"):
            raise HTTPException(status_code=400, detail="Invalid PDF data")

        stamped = ContractPDFService.add_signing_date_to_pdf(
            pdf_bytes, contract.signature_layout, body.seller_signed_at, body.buyer_signed_at
        )

        company = self.repo.get_company(self.db, user.company_id)
        try:
            signed_key = upload_pdf_to_r2(
                stamped, contract_pdf_key(company.public_id, contract.public_id, signed=True)
            )
        except Exception as e:
            logger.error(f"❌ Failed to store signed PDF for contract {public_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to store signed PDF") from e

        contract.status = "completed"
        contract.completed_at = datetime.utcnow()
        contract.signed_pdf_key = signed_key
        self.repo.add_status_history(
            self.db,
            contract.id,
            "completed",
            user.id,
            {"action": "signed_document_received", "signed_pdf_key": signed_key},
        )
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"✅ Contract {public_id} completed")

        recipients = [m.email for m in self.repo.get_company_managers(self.db, user.company_id)]
        recipients.append(contract.seller_email)
        fields = contract.custom_fields or {}
        property_address = fields.get("property_address") or (contract.property.address if contract.property else "")
        send_type = (contract.signature_envelope or {}).get("external_id", "").rsplit("::", 1)[-1]

        email_sent = False
        try:
            email_sent = await send_signed_contract_email(
                recipients,
                property_address,
                contract.seller_name,
                stamped,
                buyer_name=contract.buyer_name or None,
                contract_type=CONTRACT_TITLES.get(send_type, "Purchase Agreement"),
            )
        except Exception as e:
            logger.error(f"❌ Failed to email signed contract {public_id}: {e}")

        return {"success": True, "contract": contract, "email_sent": email_sent}
