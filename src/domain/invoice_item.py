"""Invoice Item Domain Entity

Tracks individual line items within an invoice.
"""

from decimal import Decimal
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import ForeignKey, Integer, Numeric, String
from src.domain.base import BaseModel, generate_uuid


class InvoiceItem(BaseModel, table=True):
    """
    Invoice Item - Individual line item within an invoice

    Domain Rules:
    - Each item belongs to exactly one invoice
    - position defines the stored order (used by the fiscal hash)
    - Immutable once the parent invoice is issued
    """

    __tablename__ = "invoice_items"
    __table_args__ = (
        Index("ix_invoice_items_invoice_id", "invoice_id"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
        description="Opaque item identifier"
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    position: int = Field(
        default=0,
        sa_column=Column(Integer, nullable=False, default=0),
        description="Zero-based position within the invoice"
    )

    description: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Line item description"
    )

    quantity: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Quantity"
    )

    unit_price: Decimal = Field(
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Net price per unit (precision: 18,6)"
    )

    vat_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(9, 4), nullable=True),
        description="Item VAT rate in percent"
    )

    unit: str = Field(
        default="unit",
        sa_column=Column(String(32), nullable=False, default="unit"),
        description="Unit of measure"
    )

    @property
    def net_amount(self) -> Decimal:
        """quantity * unit_price"""
        return Decimal(self.quantity or 0) * Decimal(self.unit_price or 0)
