"""AI clause and template authoring schemas"""

from typing import Optional

from pydantic import BaseModel


class GenerateClausesRequest(BaseModel):
    situation: str
    contract_details: Optional[dict] = None


class GeneratedClause(BaseModel):
    id: str
    title: str
    content: str
    status: str = "pending"


class GenerateClausesResponse(BaseModel):
    clauses: list[GeneratedClause]


class TemplatePlaceholder(BaseModel):
    key: str
    label: Optional[str] = None
    category: Optional[str] = None


class GenerateTemplateHtmlRequest(BaseModel):
    plain_text: Optional[str] = None
    # Standard placeholder catalog when omitted
    placeholders: Optional[list[TemplatePlaceholder]] = None


class GenerateTemplateHtmlResponse(BaseModel):
    html: str
    discovered_placeholders: list[str]


class InsertClauseZoneRequest(BaseModel):
    html: Optional[str] = None
    section_number: Optional[str] = None


class InsertClauseZoneResponse(BaseModel):
    html: str
    section_number: str
