"""Team schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class InviteRequest(BaseModel):
    email: Optional[str] = None
    role: str = "user"


class AcceptInviteRequest(BaseModel):
    token: Optional[str] = None


class MemberUpdate(BaseModel):
    role: Optional[str] = None
    full_name: Optional[str] = None
    monthly_contract_limit: Optional[int] = None
    is_active: Optional[bool] = None


class MemberResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: str
    is_active: bool
    monthly_contract_limit: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InviteResponse(BaseModel):
    id: int
    email: str
    role: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
