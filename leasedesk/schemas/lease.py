"""
Lease Engine Schemas
Pydantic v2 request/response models for templates, signing and generation.
"""
from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leasedesk.models.lease import LeaseStatus


# ─────────────────────── Templates ───────────────────────

class LeaseTemplateIn(BaseModel):
    """Fields shared by create and update (update is a full replace)."""
    name: str = Field(min_length=1, max_length=100)
    html_content: str = Field(min_length=1)
    description: Optional[str] = None
    is_active: bool = True
    is_default: bool = False
    template_variables: Optional[str] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Template name is required")
        return v

    @field_validator("template_variables")
    @classmethod
    def _json_object(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        try:
            parsed = json.loads(v)
        except ValueError as exc:
            raise ValueError(f"template_variables must be a JSON object: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError("template_variables must be a JSON object")
        return v


class LeaseTemplateCreate(LeaseTemplateIn):
    pass


class LeaseTemplateUpdate(LeaseTemplateIn):
    pass


class LeaseTemplateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    html_content: str
    description: Optional[str]
    is_active: bool
    is_default: bool
    template_variables: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]


# ─────────────────────── Signing ───────────────────────

class SignLeaseRequest(BaseModel):
    """Submitted by the signing page; the data URL carries the drawn signature."""
    lease_agreement_id: int
    signature_data_url: str
    signing_notes: Optional[str] = None
    signer_ip_address: str = ""
    signer_user_agent: str = ""


class DigitalSignatureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    lease_agreement_id: int
    tenant_id: int
    signed_date: datetime
    signature_image_path: str
    signer_ip_address: str
    signer_user_agent: str
    signing_notes: Optional[str]
    signature_hash: str
    is_verified: bool
    created_at: datetime
    updated_at: Optional[datetime]


class LeaseSigningView(BaseModel):
    """What a tenant (or previewing manager) sees on the signing page."""
    lease_agreement_id: int
    tenant_name: str
    room_number: str
    start_date: date
    end_date: date
    rent_amount: Decimal
    expected_rent_day: int
    generated_html_content: Optional[str]
    generated_pdf_path: Optional[str]
    status: LeaseStatus
    requires_signature: bool
    is_signed: bool
    signed_at: Optional[datetime]
    signatures: List[DigitalSignatureOut] = []


# ─────────────────────── Generation ───────────────────────

class GenerateLeaseRequest(BaseModel):
    lease_agreement_id: int
    lease_template_id: Optional[int] = None  # None -> default template
    generate_pdf: bool = True
    send_to_tenant: bool = False


class GeneratedLease(BaseModel):
    lease_agreement_id: int
    status: LeaseStatus
    lease_template_id: Optional[int]
    html_content: str
    pdf_path: Optional[str] = None
    sent: bool = False


class LeaseStatusInfo(BaseModel):
    lease_agreement_id: int
    status: LeaseStatus
    message: str
    has_document: bool
    warnings: List[str] = []
