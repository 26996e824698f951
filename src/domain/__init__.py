from .base import BaseModel, generate_uuid
from .invoice import Invoice, InvoiceStatus
from .invoice_item import InvoiceItem
from .credit_note import CreditNote, CreditNoteType, CreditNoteStatus
from .credit_note_item import CreditNoteItem
from .audit_log import InvoiceAuditLog, AuditAction
from .document_counter import DocumentCounter, DocumentClass
from .exceptions import DuplicateDocumentNumberError, ImmutableRecordError

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Invoice",
    "InvoiceStatus",
    "InvoiceItem",
    "CreditNote",
    "CreditNoteType",
    "CreditNoteStatus",
    "CreditNoteItem",
    "InvoiceAuditLog",
    "AuditAction",
    "DocumentCounter",
    "DocumentClass",
    "DuplicateDocumentNumberError",
    "ImmutableRecordError",
]
