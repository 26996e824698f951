"""Invoice Domain Entity

Tracks customer invoices, their domain status and their fiscal issuance state.
"""

from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Boolean, Date, Numeric, String, UniqueConstraint
from src.domain.base import BaseModel, generate_uuid


class InvoiceStatus(str, Enum):
    """Invoice domain status types"""
    DRAFT = "draft"
    SENT = "sent"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class Invoice(BaseModel, table=True):
    """
    Invoice - Customer invoice subject to Malta VAT rules

    Domain Rules:
    - Created as draft: mutable, no invoice_number, no invoice_hash
    - Issuance sets is_issued, issued_at, invoice_hash and status=sent
    - Once is_issued is set, invoice_number, customer, dates, financial
      fields and items are frozen; only status moves forward
    - Corrections to an issued invoice are made with credit notes
    - invoice_number is unique per owner
    """

    __tablename__ = "invoices"
    __table_args__ = (
        UniqueConstraint("owner_id", "invoice_number", name="uq_invoices_owner_number"),
        Index("ix_invoices_owner_id", "owner_id"),
        Index("ix_invoices_status", "status"),
        Index("ix_invoices_is_issued", "is_issued"),
    )

    id: str = Field(
        default_factory=generate_uuid,
        sa_column=Column(String(36), primary_key=True),
        description="Opaque invoice identifier"
    )

    owner_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Account that owns the invoice"
    )

    customer_id: str = Field(
        sa_column=Column(String(64), nullable=False),
        description="Customer the invoice is addressed to"
    )

    invoice_number: Optional[str] = Field(
        default=None,
        sa_column=Column(String(50), nullable=True),
        description="Invoice number (e.g., INV-000123), assigned at issuance if absent"
    )

    invoice_date: date = Field(
        sa_column=Column(Date, nullable=False),
        description="Invoice date"
    )

    due_date: Optional[date] = Field(
        default=None,
        sa_column=Column(Date, nullable=True),
        description="Payment due date"
    )

    amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Net amount (precision: 18,6)"
    )

    vat_rate: Optional[Decimal] = Field(
        default=None,
        sa_column=Column(Numeric(9, 4), nullable=True),
        description="Header VAT rate in percent (e.g., 18.0000)"
    )

    vat_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="VAT amount (precision: 18,6)"
    )

    total_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 6), nullable=False),
        description="Gross amount, net + VAT (precision: 18,6)"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.DRAFT,
        description="Domain status (draft, sent, paid, overdue, cancelled)"
    )

    is_issued: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False),
        description="Fiscal flag; set only by invoice issuance"
    )

    issued_at: Optional[datetime] = Field(
        default=None,
        description="Timestamp of fiscal issuance (written once)"
    )

    invoice_hash: Optional[str] = Field(
        default=None,
        sa_column=Column(String(64), nullable=True),
        description="SHA-256 hex digest of the frozen fiscal content"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )
