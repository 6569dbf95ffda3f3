"""
Declarative base and the audit columns shared by the lease tables.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class AuditMixin:
    """
    created_at / updated_at, stamped by the services from the injected Clock.
    There is no column default or onupdate hook reading the system time.
    """

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    def touch(self, now: datetime) -> None:
        if self.created_at is None:
            self.created_at = now
        self.updated_at = now
