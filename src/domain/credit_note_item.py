"""Credit Note Item Domain Entity

Line item of a credit note, mirroring the shape of an invoice item.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Integer, Numeric, String
from src.domain.base import BaseModel, generate_uuid


class CreditNoteItem(BaseModel, table=True):
    """
    Credit Note Item - Individual line item within a credit note

    Domain Rules:
    - Each item belongs to exactly one credit note
    - Written in the same transaction as its credit note; never mutated
    """

    __tablename__ = "credit_note_items"
    __table_args__ = (
        Index("ix_credit_note_items_credit_note_id", "credit_note_id"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
    )

    credit_note_id: str = Field(
        sa_column=Column(String(36), ForeignKey("credit_notes.id", ondelete="RESTRICT"), nullable=False),
        description="Foreign key to CreditNote"
    )

    position: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
    )

    vat_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(9, 4), nullable=True),
    )

    unit: str = Field(
        default="unit",
        sa_column=Column(String(32), nullable=False, default="unit"),
    )
