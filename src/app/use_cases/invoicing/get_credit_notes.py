"""Credit Note Query Use Cases

Read side of the credit note engine: the credit notes raised against an
invoice, and a single credit note with its items.
"""

from decimal import Decimal

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.credit_note_repository import (
    CreditNoteItemRepository,
    CreditNoteRepository,
)
from src.app.repositories.invoice_repository import InvoiceRepository
from .dtos import CreditNoteListResponseDTO, CreditNoteResponseDTO
from .mappers import to_credit_note_response


def _invoice_not_found(invoice_id: str) -> Error:
    return Error(
        code=ErrorCode.INVOICE_NOT_FOUND,
        message=f"Invoice {invoice_id} not found",
        reason="Invoice does not exist or belongs to another account",
    )


class ListInvoiceCreditNotes:
    """
    Use Case: List credit notes correcting an invoice

    Business Rules:
    1. Scoped to the owning account of the invoice
    2. Credit notes are returned in creation order, each with its items
    3. total_credited is the sum of the credit note amounts
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        credit_note_repo: CreditNoteRepository,
        credit_note_item_repo: CreditNoteItemRepository,
    ):
        self.invoice_repo = invoice_repo
        self.credit_note_repo = credit_note_repo
        self.credit_note_item_repo = credit_note_item_repo

    async def execute(self, invoice_id: str, account_id: str) -> Result[CreditNoteListResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, account_id)
            if not invoice:
                return Return.err(_invoice_not_found(invoice_id))

            credit_notes = []
            total_credited = Decimal("0")
            for credit_note in await self.credit_note_repo.get_by_invoice_id(invoice.id):
                items = await self.credit_note_item_repo.get_by_credit_note_id(credit_note.id)
                credit_notes.append(
                    to_credit_note_response(credit_note, items, invoice_number=invoice.invoice_number)
                )
                total_credited += credit_note.amount

            return Return.ok(
                CreditNoteListResponseDTO(
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    credit_notes=credit_notes,
                    total_credited=total_credited,
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code=ErrorCode.LIST_CREDIT_NOTES_FAILED,
                    message="Failed to list credit notes",
                    reason=str(e),
                )
            )


class GetCreditNote:
    """
    Use Case: Fetch one credit note of an invoice

    Business Rules:
    1. The credit note must belong to the account and reference the invoice
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        credit_note_repo: CreditNoteRepository,
        credit_note_item_repo: CreditNoteItemRepository,
    ):
        self.invoice_repo = invoice_repo
        self.credit_note_repo = credit_note_repo
        self.credit_note_item_repo = credit_note_item_repo

    async def execute(
        self, invoice_id: str, credit_note_id: str, account_id: str
    ) -> Result[CreditNoteResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, account_id)
            if not invoice:
                return Return.err(_invoice_not_found(invoice_id))

            credit_note = await self.credit_note_repo.get_by_id(credit_note_id, account_id)
            if not credit_note or credit_note.invoice_id != invoice.id:
                return Return.err(
                    Error(
                        code=ErrorCode.CREDIT_NOTE_NOT_FOUND,
                        message=f"Credit note {credit_note_id} not found for invoice {invoice_id}",
                        reason="Credit note does not exist or references another invoice",
                    )
                )

            items = await self.credit_note_item_repo.get_by_credit_note_id(credit_note.id)
            return Return.ok(
                to_credit_note_response(credit_note, items, invoice_number=invoice.invoice_number)
            )

        except Exception as e:
            return Return.err(
                Error(
                    code=ErrorCode.GET_CREDIT_NOTE_FAILED,
                    message="Failed to load credit note",
                    reason=str(e),
                )
            )
