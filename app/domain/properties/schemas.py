"""Property schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

PROPERTY_STATUSES = ("none", "in_escrow", "terminated", "pending", "closed")


class PropertyStatusUpdate(BaseModel):
    status: str


class PropertyResponse(BaseModel):
    public_id: str
    address: str
    city: str
    state: str
    zip: str
    status: str
    contract_count: int = 0
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
