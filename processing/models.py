"""
HiggsFlow - Database Models

SQLAlchemy ORM models for the client store used by document matching.
"""

import uuid
from datetime import datetime
from enum import Enum as PyEnum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, Enum, Index, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if TYPE_CHECKING:
    from processing.client_matching.matchers import Candidate


class Base(DeclarativeBase):
    pass


class ClientStatus(PyEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def generate_uuid() -> str:
    return str(uuid.uuid4())


class Client(Base):
    """
    Client (buyer) profile. Purchase orders and proforma invoices are linked
    to these records, and their business terms pre-fill new documents.
    """

    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=generate_uuid
    )
    name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    short_name: Mapped[Optional[str]] = mapped_column(String(50))

    # Contact
    email: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(String(50))
    industry: Mapped[Optional[str]] = mapped_column(Text)

    # Business terms
    payment_terms: Mapped[str] = mapped_column(String(50), default="Net 30")
    delivery_terms: Mapped[str] = mapped_column(String(20), default="DDP")
    currency: Mapped[str] = mapped_column(String(3), default="MYR")

    status: Mapped[ClientStatus] = mapped_column(
        Enum(ClientStatus), nullable=False, default=ClientStatus.ACTIVE, index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        Index("ix_clients_status_name", "status", "name"),
    )

    def to_candidate(self) -> "Candidate":
        """Snapshot this record as a match candidate."""
        from processing.client_matching.matchers import Candidate

        return Candidate(
            id=self.id,
            name=self.name,
            short_name=self.short_name,
            email=self.email,
            phone=self.phone,
            payment_terms=self.payment_terms,
            delivery_terms=self.delivery_terms,
            currency=self.currency,
        )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name={self.name}, status={self.status.value})>"
