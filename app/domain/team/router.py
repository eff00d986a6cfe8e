"""Team router - Members and invites"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_company_user, get_current_user, require_manager
from ...database import get_db
from ...models import User
from .schemas import AcceptInviteRequest, InviteRequest, InviteResponse, MemberResponse, MemberUpdate
from .service import TeamService

router = APIRouter(prefix="/team", tags=["Team"])


def get_team_service(db: Session = Depends(get_db)) -> TeamService:
    """Dependency injection for TeamService"""
    return TeamService(db)


# ============================================================================
# MEMBERS
# ============================================================================


@router.get("")
async def get_team(
    user: User = Depends(get_current_company_user),
    service: TeamService = Depends(get_team_service),
):
    """Team members, the caller's role and the company plan"""
    team = service.get_team(user)
    team["members"] = [MemberResponse.model_validate(m) for m in team["members"]]
    return team


# ============================================================================
# INVITES
# ============================================================================


@router.get("/invites", response_model=list[InviteResponse])
async def get_pending_invites(
    user: User = Depends(get_current_company_user),
    service: TeamService = Depends(get_team_service),
):
    return service.get_pending_invites(user)


@router.post("/invite")
async def invite_member(
    body: InviteRequest,
    user: User = Depends(require_manager),
    service: TeamService = Depends(get_team_service),
):
    """Invite a user by email"""
    result = await service.invite_member(body, user)
    result["invite"] = InviteResponse.model_validate(result["invite"])
    return result


@router.get("/invite/verify")
async def verify_invite(
    token: Optional[str] = None,
    service: TeamService = Depends(get_team_service),
):
    """Look up an invite before signup; no account required"""
    return service.verify_invite(token)


@router.post("/invite/accept")
async def accept_invite(
    body: AcceptInviteRequest,
    user: User = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
):
    """Accept an invite with the signed-in account"""
    return await service.accept_invite(body.token, user)


@router.delete("/invites/{invite_id}")
async def delete_invite(
    invite_id: int,
    user: User = Depends(require_manager),
    service: TeamService = Depends(get_team_service),
):
    service.delete_invite(invite_id, user)
    return {"message": "Invite deleted"}


@router.patch("/{member_id}", response_model=MemberResponse)
async def update_member(
    member_id: int,
    body: MemberUpdate,
    user: User = Depends(require_manager),
    service: TeamService = Depends(get_team_service),
):
    return service.update_member(member_id, body, user)


@router.delete("/{member_id}")
async def remove_member(
    member_id: int,
    user: User = Depends(require_manager),
    service: TeamService = Depends(get_team_service),
):
    service.remove_member(member_id, user)
    return {"message": "Member removed"}
