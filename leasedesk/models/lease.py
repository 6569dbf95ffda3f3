"""
Digital Lease Models
Tables: lease_agreements, lease_templates, lease_signatures
"""
import calendar
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from sqlalchemy import (
    Boolean, Date, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer,
    Numeric, String, Text, text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from leasedesk.db.base import Base, AuditMixin


class LeaseStatus(str, Enum):
    DRAFT = "draft"
    GENERATED = "generated"
    SENT = "sent"
    SIGNED = "signed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LeaseAgreement(Base, AuditMixin):
    """
    Lease agreement and its document lifecycle.
    Created in DRAFT by the CRUD layer; every later status change goes
    through services.lease_state.
    """
    __tablename__ = "lease_agreements"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)

    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenants.id"), nullable=False, index=True
    )
    room_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rooms.id"), nullable=False, index=True
    )

    # Terms
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    expected_rent_day: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    status: Mapped[LeaseStatus] = mapped_column(
        SQLEnum(LeaseStatus), default=LeaseStatus.DRAFT, nullable=False, index=True
    )

    # Document output
    lease_template_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("lease_templates.id", ondelete="SET NULL"), nullable=True
    )
    generated_html_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    generated_pdf_path: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Signing
    requires_signature: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_signed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Event timestamps (UTC)
    generated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    signed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_modified_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Optimistic concurrency token
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    tenant = relationship("Tenant", lazy="joined")
    room = relationship("Room", lazy="joined")
    template = relationship("LeaseTemplate")
    signatures: Mapped[List["DigitalSignature"]] = relationship(
        "DigitalSignature",
        back_populates="lease",
        cascade="all, delete-orphan",
        order_by="DigitalSignature.signed_date",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("idx_lease_agreements_tenant_status", "tenant_id", "status"),
    )

    def rent_due_date(self, today: date) -> Optional[date]:
        """
        Next date rent falls due on or after *today*.
        The due day is clamped to the month's length; never earlier than the
        start date, None once the lease has ended.
        """
        if self.end_date < today:
            return None

        year, month = today.year, today.month
        if today.day > self.expected_rent_day:
            month += 1
            if month > 12:
                month = 1
                year += 1

        day = min(self.expected_rent_day, calendar.monthrange(year, month)[1])
        due = date(year, month, day)

        if due < self.start_date:
            due = self.start_date
        if due > self.end_date:
            return None
        return due


class LeaseTemplate(Base, AuditMixin):
    """Reusable HTML lease body with {{Placeholder}} tokens."""
    __tablename__ = "lease_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    html_content: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # JSON object: placeholder name -> human description
    template_variables: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        # At most one default row; the store clears the flag before setting it.
        Index(
            "uq_lease_templates_single_default",
            "is_default",
            unique=True,
            sqlite_where=text("is_default = 1"),
            postgresql_where=text("is_default = true"),
        ),
    )


class DigitalSignature(Base, AuditMixin):
    """
    Captured tenant signature for a lease.
    Immutable once written apart from is_verified / updated_at.
    """
    __tablename__ = "lease_signatures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    lease_agreement_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lease_agreements.id", ondelete="CASCADE"), nullable=False
    )
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenants.id"), nullable=False, index=True
    )

    signed_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    signature_image_path: Mapped[str] = mapped_column(String(500), nullable=False)

    # Audit trail
    signer_ip_address: Mapped[str] = mapped_column(String(45), nullable=False)
    signer_user_agent: Mapped[str] = mapped_column(String(500), nullable=False)
    signing_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # base64(SHA-256) over signing metadata and the image digest
    signature_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    lease = relationship("LeaseAgreement", back_populates="signatures")
    tenant = relationship("Tenant")

    __table_args__ = (
        # One signature per lease
        Index("uq_lease_signatures_lease", "lease_agreement_id", unique=True),
    )
