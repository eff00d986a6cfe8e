"""Support ticket schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class SupportTicketCreate(BaseModel):
    subject: Optional[str] = None
    message: Optional[str] = None
    category: Optional[str] = None


class SupportTicketResponse(BaseModel):
    public_id: str
    subject: str
    category: str
    status: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
