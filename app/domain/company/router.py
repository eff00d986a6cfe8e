"""Company router - Onboarding, settings and plan"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_company_user, get_current_user, require_manager
from ...database import get_db
from ...models import User
from .schemas import CompanyResponse, OnboardingRequest, PlanSelectRequest, SettingsUpdate
from .service import CompanyService

router = APIRouter(prefix="/company", tags=["Company"])


def get_company_service(db: Session = Depends(get_db)) -> CompanyService:
    """Dependency injection for CompanyService"""
    return CompanyService(db)


@router.post("/onboarding", response_model=CompanyResponse)
async def onboard_company(
    body: OnboardingRequest,
    user: User = Depends(get_current_user),
    service: CompanyService = Depends(get_company_service),
):
    """Create a company for a user who has none"""
    return service.onboard(body, user)


@router.get("/settings")
async def get_settings(
    user: User = Depends(get_current_company_user),
    service: CompanyService = Depends(get_company_service),
):
    """Company profile, usage summary and user count"""
    settings = service.get_settings(user)
    settings["company"] = CompanyResponse.model_validate(settings["company"])
    return settings


@router.patch("/settings", response_model=CompanyResponse)
async def update_settings(
    body: SettingsUpdate,
    user: User = Depends(require_manager),
    service: CompanyService = Depends(get_company_service),
):
    return service.update_settings(body, user)


@router.post("/plan", response_model=CompanyResponse)
async def select_plan(
    body: PlanSelectRequest,
    user: User = Depends(require_manager),
    service: CompanyService = Depends(get_company_service),
):
    return service.select_plan(body, user)
