"""Request schemas for Invoicing API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field

from src.app.use_cases.invoicing.dtos import InvoiceItemDTO
from src.domain.invoice import InvoiceStatus


class CreateInvoiceRequestSchema(BaseModel):
    """
    Request schema for creating a draft invoice

    Used for POST /invoices endpoint. The owning account comes from the
    X-Account-Id header.
    """

    customer_id: str = Field(
        ...,
        min_length=1,
        description="Customer identifier (required, non-empty)"
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
        description="Header VAT rate in percent (e.g., 18)"
    )

    items: List[InvoiceItemDTO] = Field(
        default_factory=list,
        description="Line items in display order"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "cust_001",
                "invoice_date": "2024-02-01",
                "due_date": "2024-03-01",
                "vat_rate": "18",
                "items": [
                    {
                        "description": "Consulting services",
                        "quantity": "5",
                        "unit_price": "100.00",
                        "vat_rate": "18",
                        "unit": "hour"
                    }
                ]
            }
        }


class UpdateInvoiceRequestSchema(BaseModel):
    """
    Request schema for editing a draft invoice

    Used for PATCH /invoices/{invoice_id}. Omitted fields are left unchanged.
    """

    customer_id: Optional[str] = Field(default=None, min_length=1)
    invoice_date: Optional[date] = Field(default=None)
    due_date: Optional[date] = Field(default=None)
    vat_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    items: Optional[List[InvoiceItemDTO]] = Field(
        default=None,
        description="Replaces the full item list when provided"
    )


class UpdateStatusRequestSchema(BaseModel):
    """Request schema for POST /invoices/{invoice_id}/status"""

    status: InvoiceStatus = Field(
        ...,
        description="Target status (paid, overdue or cancelled)"
    )


class CreateCreditNoteRequestSchema(BaseModel):
    """
    Request schema for a partial credit note

    Used for POST /invoices/{invoice_id}/credit-notes/adjustments.
    """

    reason: str = Field(
        ...,
        min_length=1,
        description="Reason for the correction"
    )

    items: List[InvoiceItemDTO] = Field(
        ...,
        min_length=1,
        description="Items to credit (amount is recomputed from these)"
    )
