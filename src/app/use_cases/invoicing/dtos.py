"""Data Transfer Objects for Invoicing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class InvoiceItemDTO(BaseModel):
    """
    Line item input

    Used for draft invoice items and credit note adjustment items.
    """

    description: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Line item description"
    )

    quantity: Decimal = Field(
        ...,
        gt=0,
        description="Quantity (must be > 0)"
    )

    unit_price: Decimal = Field(
        ...,
        ge=0,
        description="Net price per unit"
    )

    vat_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=100,
        description="VAT rate in percent (falls back to the header rate)"
    )

    unit: str = Field(
        default="unit",
        max_length=32,
        description="Unit of measure"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "description": "Consulting services",
                "quantity": "5",
                "unit_price": "100.00",
                "vat_rate": "18",
                "unit": "hour"
            }
        }


class CreateDraftInvoiceCommandDTO(BaseModel):
    """
    Command DTO for creating a draft invoice

    Drafts carry no invoice number and no hash until they are issued.
    """

    account_id: str = Field(
        ...,
        min_length=1,
        description="Account (tenant) that owns the invoice"
    )

    customer_id: str = Field(
        ...,
        min_length=1,
        description="Customer identifier"
    )

    invoice_date: date = Field(
        ...,
        description="Invoice date"
    )

    due_date: Optional[date] = Field(
        default=None,
        description="Payment due date"
    )

    vat_rate: Optional[Decimal] = Field(
        default=None,
        ge=0,
        le=100,
        description="Header VAT rate in percent"
    )

    items: List[InvoiceItemDTO] = Field(
        default_factory=list,
        description="Line items in display order"
    )

    user_id: Optional[str] = Field(
        default=None,
        description="Acting user"
    )


class UpdateDraftInvoiceCommandDTO(BaseModel):
    """
    Command DTO for editing a draft invoice

    Only provided fields are changed. When items is provided it replaces
    the full item list.
    """

    customer_id: Optional[str] = Field(default=None, min_length=1)
    invoice_date: Optional[date] = Field(default=None)
    due_date: Optional[date] = Field(default=None)
    vat_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    items: Optional[List[InvoiceItemDTO]] = Field(default=None)


class InvoiceItemResponseDTO(BaseModel):
    """Line item output"""

    item_id: str
    position: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    vat_rate: Optional[Decimal] = None
    unit: str


class InvoiceResponseDTO(BaseModel):
    """
    Response DTO for invoice read/write operations

    Returned by CreateDraftInvoice and UpdateDraftInvoice.
    """

    invoice_id: str = Field(..., description="Invoice ID")
    owner_id: str = Field(..., description="Owning account")
    customer_id: str = Field(..., description="Customer identifier")
    invoice_number: Optional[str] = Field(default=None, description="Invoice number (None for drafts)")
    invoice_date: date = Field(..., description="Invoice date")
    due_date: Optional[date] = Field(default=None, description="Payment due date")
    amount: Decimal = Field(..., description="Net amount")
    vat_rate: Optional[Decimal] = Field(default=None, description="Header VAT rate in percent")
    vat_amount: Decimal = Field(..., description="VAT amount")
    total_amount: Decimal = Field(..., description="Gross amount")
    status: str = Field(..., description="Domain status")
    is_issued: bool = Field(..., description="Fiscal flag")
    issued_at: Optional[datetime] = Field(default=None, description="Issuance timestamp")
    invoice_hash: Optional[str] = Field(default=None, description="Fiscal hash")
    items: List[InvoiceItemResponseDTO] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    warnings: List[str] = Field(default_factory=list, description="Non-fatal warnings")


class IssueInvoiceResponseDTO(BaseModel):
    """
    Response DTO for invoice issuance

    Returned by IssueInvoice.
    """

    invoice_id: str = Field(..., description="Invoice ID")
    invoice_number: str = Field(..., description="Final invoice number")
    status: str = Field(..., description="Domain status after issuance (sent)")
    is_issued: bool = Field(default=True, description="Fiscal flag")
    issued_at: datetime = Field(..., description="Issuance timestamp")
    invoice_hash: str = Field(..., description="SHA-256 hex digest")
    message: str = Field(..., description="Human-readable outcome")
    warnings: List[str] = Field(default_factory=list, description="Non-fatal warnings")

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": "5b0c7f0e-1b7e-4c5d-9d0a-1a2b3c4d5e6f",
                "invoice_number": "INV-000123",
                "status": "sent",
                "is_issued": True,
                "issued_at": "2024-02-01T09:30:00",
                "invoice_hash": "9f2c...e1",
                "message": "Invoice INV-000123 is now immutable and compliant with Malta VAT regulations.",
                "warnings": []
            }
        }


class EditCheckResponseDTO(BaseModel):
    """Response DTO for CanEditInvoice"""

    invoice_id: str
    can_edit: bool
    reason: Optional[str] = None


class IntegrityCheckResponseDTO(BaseModel):
    """
    Response DTO for VerifyInvoiceIntegrity

    integrity_warning is only set when a stored hash exists and no longer
    matches the stored content.
    """

    invoice_id: str
    is_valid: bool
    stored_hash: Optional[str] = None
    calculated_hash: Optional[str] = None
    integrity_warning: bool = False
    message: str


class AuditLogEntryDTO(BaseModel):
    """Single audit trail entry"""

    entry_id: int
    invoice_id: str
    user_id: Optional[str] = None
    action: str
    old_data: Optional[Dict[str, Any]] = None
    new_data: Dict[str, Any]
    timestamp: datetime


class AuditTrailResponseDTO(BaseModel):
    """Response DTO for GetInvoiceAuditTrail"""

    invoice_id: str
    entries: List[AuditLogEntryDTO]


class UpdateInvoiceStatusResponseDTO(BaseModel):
    """Response DTO for UpdateInvoiceStatus"""

    invoice_id: str
    previous_status: str
    status: str
    warnings: List[str] = Field(default_factory=list)


class CreateCreditNoteCommandDTO(BaseModel):
    """
    Command DTO for a partial credit note (adjustment)

    The credited amount is always recomputed from the items.
    """

    invoice_id: str = Field(..., min_length=1)
    account_id: str = Field(..., min_length=1)
    reason: str = Field(..., min_length=1, description="Reason for the correction")
    items: List[InvoiceItemDTO] = Field(..., min_length=1, description="Items to credit")
    user_id: Optional[str] = Field(default=None)


class CreditNoteItemResponseDTO(BaseModel):
    """Credit note line item output"""

    item_id: str
    position: int
    description: str
    quantity: Decimal
    unit_price: Decimal
    vat_rate: Optional[Decimal] = None
    unit: str


class CreditNoteResponseDTO(BaseModel):
    """
    Response DTO for credit note creation

    Returned by CreateCreditNoteFromInvoice and CreateCreditNote.
    """

    credit_note_id: str = Field(..., description="Credit note ID")
    credit_note_number: str = Field(..., description="Credit note number (e.g., CN-000045)")
    invoice_id: str = Field(..., description="Corrected invoice")
    invoice_number: Optional[str] = Field(default=None, description="Corrected invoice number")
    customer_id: str
    type: str
    status: str
    amount: Decimal = Field(..., description="Net amount credited")
    vat_rate: Optional[Decimal] = None
    reason: str
    credit_note_date: date
    items: List[CreditNoteItemResponseDTO] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list, description="Non-fatal warnings")

    class Config:
        json_schema_extra = {
            "example": {
                "credit_note_id": "a1f3...",
                "credit_note_number": "CN-000045",
                "invoice_id": "5b0c...",
                "invoice_number": "INV-000123",
                "customer_id": "cust_001",
                "type": "invoice_adjustment",
                "status": "issued",
                "amount": "500.00",
                "vat_rate": "18",
                "reason": "Full credit for invoice INV-000123",
                "credit_note_date": "2024-02-10",
                "items": [],
                "warnings": []
            }
        }


class IntegrityMismatchDTO(BaseModel):
    """Issued invoice whose stored hash does not match its content"""

    invoice_id: str
    owner_id: str
    invoice_number: Optional[str] = None
    stored_hash: str
    calculated_hash: str


class IntegrityAuditResultDTO(BaseModel):
    """Result of a batch integrity audit over issued invoices"""

    total_invoices_checked: int
    mismatches_found: int
    mismatches: List[IntegrityMismatchDTO]
    audit_time: datetime
    execution_time_ms: int


class CreditNoteListResponseDTO(BaseModel):
    """Response DTO for ListInvoiceCreditNotes"""

    invoice_id: str
    invoice_number: Optional[str] = None
    credit_notes: List[CreditNoteResponseDTO]
    total_credited: Decimal = Field(..., description="Sum of credited net amounts")
