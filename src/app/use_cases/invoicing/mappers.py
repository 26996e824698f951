"""Entity to DTO conversions shared by the invoicing use cases"""

from typing import List, Optional, Sequence

from src.domain.audit_log import InvoiceAuditLog
from src.domain.credit_note import CreditNote
from src.domain.credit_note_item import CreditNoteItem
from src.domain.invoice import Invoice
from src.domain.invoice_item import InvoiceItem
from .dtos import (
    AuditLogEntryDTO,
    CreditNoteItemResponseDTO,
    CreditNoteResponseDTO,
    InvoiceItemResponseDTO,
    InvoiceResponseDTO,
)


def to_invoice_response(
    invoice: Invoice,
    items: Sequence[InvoiceItem],
    warnings: Optional[List[str]] = None,
) -> InvoiceResponseDTO:
    return InvoiceResponseDTO(
        invoice_id=invoice.id,
        owner_id=invoice.owner_id,
        customer_id=invoice.customer_id,
        invoice_number=invoice.invoice_number,
        invoice_date=invoice.invoice_date,
        due_date=invoice.due_date,
        amount=invoice.amount,
        vat_rate=invoice.vat_rate,
        vat_amount=invoice.vat_amount,
        total_amount=invoice.total_amount,
        status=invoice.status.value,
        is_issued=invoice.is_issued,
        issued_at=invoice.issued_at,
        invoice_hash=invoice.invoice_hash,
        items=[
            InvoiceItemResponseDTO(
                item_id=item.id,
                position=item.position,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                vat_rate=item.vat_rate,
                unit=item.unit,
            )
            for item in items
        ],
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
        warnings=warnings or [],
    )


def to_credit_note_response(
    credit_note: CreditNote,
    items: Sequence[CreditNoteItem],
    invoice_number: Optional[str] = None,
    warnings: Optional[List[str]] = None,
) -> CreditNoteResponseDTO:
    return CreditNoteResponseDTO(
        credit_note_id=credit_note.id,
        credit_note_number=credit_note.credit_note_number,
        invoice_id=credit_note.invoice_id,
        invoice_number=invoice_number,
        customer_id=credit_note.customer_id,
        type=credit_note.type.value,
        status=credit_note.status.value,
        amount=credit_note.amount,
        vat_rate=credit_note.vat_rate,
        reason=credit_note.reason,
        credit_note_date=credit_note.credit_note_date,
        items=[
            CreditNoteItemResponseDTO(
                item_id=item.id,
                position=item.position,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                vat_rate=item.vat_rate,
                unit=item.unit,
            )
            for item in items
        ],
        warnings=warnings or [],
    )


def to_audit_entry(entry: InvoiceAuditLog) -> AuditLogEntryDTO:
    return AuditLogEntryDTO(
        entry_id=entry.id,
        invoice_id=entry.invoice_id,
        user_id=entry.user_id,
        action=entry.action.value,
        old_data=entry.old_data,
        new_data=entry.new_data or {},
        timestamp=entry.timestamp,
    )
