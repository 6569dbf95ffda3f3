from typing import Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from leasedesk.db.base import Base, AuditMixin


class Room(Base, AuditMixin):
    """Rentable room - read-only lookup for lease rendering."""
    __tablename__ = "rooms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    number: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
