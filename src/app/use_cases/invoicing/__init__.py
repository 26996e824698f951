"""Invoicing domain use cases"""
from .create_draft_invoice import CreateDraftInvoice
from .update_draft_invoice import UpdateDraftInvoice
from .issue_invoice import IssueInvoice
from .can_edit_invoice import CanEditInvoice
from .verify_invoice_integrity import VerifyInvoiceIntegrity
from .audit_invoice_integrity import AuditInvoiceIntegrity
from .get_audit_trail import GetInvoiceAuditTrail
from .update_invoice_status import UpdateInvoiceStatus
from .create_credit_note import CreateCreditNoteFromInvoice, CreateCreditNote
from .get_credit_notes import ListInvoiceCreditNotes, GetCreditNote
from .dtos import (
    InvoiceItemDTO,
    CreateDraftInvoiceCommandDTO,
    UpdateDraftInvoiceCommandDTO,
    InvoiceResponseDTO,
    IssueInvoiceResponseDTO,
    EditCheckResponseDTO,
    IntegrityCheckResponseDTO,
    AuditTrailResponseDTO,
    UpdateInvoiceStatusResponseDTO,
    CreateCreditNoteCommandDTO,
    CreditNoteResponseDTO,
    CreditNoteListResponseDTO,
    IntegrityAuditResultDTO,
)

__all__ = [
    "CreateDraftInvoice",
    "UpdateDraftInvoice",
    "IssueInvoice",
    "CanEditInvoice",
    "VerifyInvoiceIntegrity",
    "AuditInvoiceIntegrity",
    "GetInvoiceAuditTrail",
    "UpdateInvoiceStatus",
    "CreateCreditNoteFromInvoice",
    "CreateCreditNote",
    "ListInvoiceCreditNotes",
    "GetCreditNote",
    "InvoiceItemDTO",
    "CreateDraftInvoiceCommandDTO",
    "UpdateDraftInvoiceCommandDTO",
    "InvoiceResponseDTO",
    "IssueInvoiceResponseDTO",
    "EditCheckResponseDTO",
    "IntegrityCheckResponseDTO",
    "AuditTrailResponseDTO",
    "UpdateInvoiceStatusResponseDTO",
    "CreateCreditNoteCommandDTO",
    "CreditNoteResponseDTO",
    "CreditNoteListResponseDTO",
    "IntegrityAuditResultDTO",
]
