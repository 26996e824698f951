from .invoice_repository import InvoiceRepository
from .invoice_item_repository import InvoiceItemRepository
from .credit_note_repository import CreditNoteRepository, CreditNoteItemRepository
from .audit_log_repository import AuditLogRepository
from .document_sequence_repository import DocumentSequenceRepository

__all__ = [
    "InvoiceRepository",
    "InvoiceItemRepository",
    "CreditNoteRepository",
    "CreditNoteItemRepository",
    "AuditLogRepository",
    "DocumentSequenceRepository",
]
