from . import immutability_guards  # noqa: F401  registers mapper events
from .invoice_repository import SqlAlchemyInvoiceRepository
from .invoice_item_repository import SqlAlchemyInvoiceItemRepository
from .credit_note_repository import (
    SqlAlchemyCreditNoteRepository,
    SqlAlchemyCreditNoteItemRepository,
)
from .audit_log_repository import SqlAlchemyAuditLogRepository
from .document_sequence_repository import SqlAlchemyDocumentSequenceRepository

__all__ = [
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyInvoiceItemRepository",
    "SqlAlchemyCreditNoteRepository",
    "SqlAlchemyCreditNoteItemRepository",
    "SqlAlchemyAuditLogRepository",
    "SqlAlchemyDocumentSequenceRepository",
]
