"""Template schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class TemplateCreate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = []
    html_content: Optional[str] = None
    signature_layout: Optional[str] = None
    custom_fields: Optional[list[dict[str, Any]]] = None


class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    html_content: Optional[str] = None
    signature_layout: Optional[str] = None
    custom_fields: Optional[list[dict[str, Any]]] = None
    field_config: Optional[dict[str, Any]] = None


class TemplateCopyRequest(BaseModel):
    name: Optional[str] = None


class TemplateResponse(BaseModel):
    public_id: str
    name: str
    description: Optional[str] = None
    tags: Optional[list[str]] = None
    html_content: str
    signature_layout: str
    custom_fields: Optional[list] = None
    used_placeholders: Optional[list[str]] = None
    field_config: Optional[dict] = None
    is_example: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
