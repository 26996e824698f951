"""Credit Note Domain Entity

Append-only corrective document offsetting all or part of an issued invoice.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Date, ForeignKey, Numeric, String, Text, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid


class CreditNoteType(str, Enum):
    """Credit note types"""
    INVOICE_ADJUSTMENT = "invoice_adjustment"


class CreditNoteStatus(str, Enum):
    """Credit note status types"""
    ISSUED = "issued"


class CreditNote(BaseModel, table=True):
    """
    Credit Note - Correction of exactly one issued invoice

    Domain Rules:
    - invoice_id is required; the referenced invoice must be issued and
      neither draft, paid nor cancelled at creation time
    - credit_note_number is unique per owner
    - Created once together with its items; never updated or deleted
    """

    __tablename__ = "credit_notes"
    __table_args__ = (
        UniqueConstraint("owner_id", "credit_note_number", name="uq_credit_notes_owner_number"),
        Index("ix_credit_notes_owner_id", "owner_id"),
        Index("ix_credit_notes_invoice_id", "invoice_id"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
        description="Opaque credit note identifier"
    )

    owner_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Account that owns the credit note"
    )

    customer_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Customer of the original invoice"
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), ForeignKey("invoices.id", ondelete="RESTRICT"), nullable=False),
        description="Invoice corrected by this credit note"
    )

    credit_note_number: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Credit note number (e.g., CN-000045)"
    )

    type: CreditNoteType = Field(
        default=CreditNoteType.INVOICE_ADJUSTMENT,
        description="Credit note type"
    )

    status: CreditNoteStatus = Field(
        default=CreditNoteStatus.ISSUED,
        description="Credit note status"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Net amount credited (precision: 18,6)"
    )

    vat_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(9, 4), nullable=True),
        description="VAT rate in percent"
    )

    reason: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Free-text reason for the correction"
    )

    credit_note_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Credit note date"
    )

    issued_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Issuance timestamp"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Creation timestamp"
    )
