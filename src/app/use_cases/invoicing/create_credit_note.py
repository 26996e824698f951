"""Credit Note Use Cases

Corrections of issued invoices. An issued invoice is never edited; it is
offset by an append-only credit note that references it.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.credit_note_repository import (
    CreditNoteItemRepository,
    CreditNoteRepository,
)
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.services.audit_log_writer import AuditLogWriter
from src.app.services.invoice_lifecycle import (
    CENT,
    credit_note_precondition_error,
    net_amount_from_items,
)
from src.app.services.numbering_service import NumberingService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.audit_log import AuditAction
from src.domain.credit_note import CreditNote, CreditNoteStatus, CreditNoteType
from src.domain.credit_note_item import CreditNoteItem
from src.domain.document_counter import DocumentClass
from src.domain.exceptions import DuplicateDocumentNumberError
from src.domain.invoice import Invoice
from .dtos import CreateCreditNoteCommandDTO, CreditNoteResponseDTO
from .mappers import to_credit_note_response

logger = logging.getLogger(__name__)


class _CreditNoteIssuer:
    """Shared load, eligibility, numbering and write steps of credit note creation"""

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        credit_note_repo: CreditNoteRepository,
        credit_note_item_repo: CreditNoteItemRepository,
        numbering_service: NumberingService,
        audit_writer: AuditLogWriter,
        default_vat_rate: Decimal,
        credit_note_prefix: str = "CN-",
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.credit_note_repo = credit_note_repo
        self.credit_note_item_repo = credit_note_item_repo
        self.numbering_service = numbering_service
        self.audit_writer = audit_writer
        self.credit_note_prefix = credit_note_prefix
        self.default_vat_rate = default_vat_rate

    async def _load_eligible_invoice(self, invoice_id: str, account_id: str):
        """
        Returns:
            (invoice, items, None) if a credit note may be raised,
            (None, None, Error) otherwise
        """
        invoice = await self.invoice_repo.get_by_id(invoice_id, account_id)
        if not invoice:
            return None, None, Error(
                code=ErrorCode.INVOICE_NOT_FOUND,
                message=f"Invoice {invoice_id} not found",
                reason="Invoice does not exist or belongs to another account",
            )

        items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)
        error = credit_note_precondition_error(invoice, items)
        if error:
            return None, None, error

        return invoice, items, None

    def _resolve_vat_rate(self, invoice: Invoice, items: Sequence) -> Decimal:
        if invoice.vat_rate is not None:
            return invoice.vat_rate
        for item in items:
            if item.vat_rate is not None:
                return item.vat_rate
        return self.default_vat_rate

    async def _issue(
        self,
        invoice: Invoice,
        account_id: str,
        source_items: Sequence,
        reason: str,
        user_id: Optional[str],
    ) -> Result[CreditNoteResponseDTO]:
        vat_rate = self._resolve_vat_rate(invoice, source_items)
        amount = net_amount_from_items(source_items).quantize(CENT)

        base_number = await self.numbering_service.next_number(
            account_id, DocumentClass.CREDIT_NOTE, self.credit_note_prefix
        )

        now = datetime.utcnow()
        credit_note = None
        for candidate in self.numbering_service.collision_candidates(base_number):
            try:
                credit_note = await self.credit_note_repo.create(
                    CreditNote(
                        owner_id=account_id,
                        customer_id=invoice.customer_id,
                        invoice_id=invoice.id,
                        credit_note_number=candidate,
                        type=CreditNoteType.INVOICE_ADJUSTMENT,
                        status=CreditNoteStatus.ISSUED,
                        amount=amount,
                        vat_rate=vat_rate,
                        reason=reason,
                        credit_note_date=now.date(),
                        issued_at=now,
                    )
                )
                break
            except DuplicateDocumentNumberError:
                continue

        if credit_note is None:
            await self.uow.rollback()
            logger.error(
                f"Could not create credit note for invoice {invoice.id}: number "
                f"{base_number} and its fallbacks are already in use for account {account_id}"
            )
            return Return.err(
                Error(
                    code=ErrorCode.DOCUMENT_NUMBER_COLLISION,
                    message=f"Credit note number {base_number} is already in use. Please try again.",
                    reason="collision retries exhausted",
                )
            )

        items: List[CreditNoteItem] = [
            CreditNoteItem(
                credit_note_id=credit_note.id,
                position=position,
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                vat_rate=item.vat_rate if item.vat_rate is not None else vat_rate,
                unit=item.unit,
            )
            for position, item in enumerate(source_items)
        ]
        created_items = await self.credit_note_item_repo.create_many(items)

        await self.uow.commit()
        logger.info(
            f"Credit note {credit_note.credit_note_number} created for invoice "
            f"{invoice.invoice_number} (amount={amount})"
        )

        warnings = []
        warning = await self.audit_writer.record(
            invoice_id=invoice.id,
            user_id=user_id,
            action=AuditAction.CREDIT_NOTE_CREATED,
            new_data={
                "credit_note_id": credit_note.id,
                "credit_note_number": credit_note.credit_note_number,
                "amount": amount,
                "reason": reason,
            },
        )
        if warning:
            warnings.append(warning)

        return Return.ok(
            to_credit_note_response(
                credit_note, created_items, invoice.invoice_number, warnings
            )
        )

    def _failed(self, e: Exception) -> Error:
        return Error(
            code=ErrorCode.CREATE_CREDIT_NOTE_FAILED,
            message="Failed to create credit note",
            reason=str(e),
        )


class CreateCreditNoteFromInvoice(_CreditNoteIssuer):
    """
    Use Case: Fully credit an issued invoice

    Business Rules:
    1. The invoice must exist, belong to the account and be issued
    2. Draft, paid and cancelled invoices cannot be credited
    3. The invoice must have at least one item
    4. The credited amount is recomputed from the items, never copied from
       the header
    5. VAT rate: invoice header, else first item, else the default rate
    6. Header and mirrored items are written in one transaction

    Flow:
    1. Load invoice and items, check eligibility
    2. Draw the next credit note number
    3. Create header (retry generated number on collision)
    4. Mirror items
    5. Commit transaction
    6. Append "credit_note_created" audit entry
    7. Return response
    """

    async def execute(
        self, invoice_id: str, account_id: str, user_id: Optional[str] = None
    ) -> Result[CreditNoteResponseDTO]:
        try:
            # Step 1: Load and check eligibility
            invoice, items, error = await self._load_eligible_invoice(invoice_id, account_id)
            if error:
                return Return.err(error)

            # Steps 2-7
            return await self._issue(
                invoice,
                account_id,
                items,
                reason=f"Full credit for invoice {invoice.invoice_number}",
                user_id=user_id,
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to create credit note for invoice {invoice_id}: {e}")
            return Return.err(self._failed(e))


class CreateCreditNote(_CreditNoteIssuer):
    """
    Use Case: Partially credit an issued invoice

    Same eligibility and write rules as CreateCreditNoteFromInvoice, with
    caller-supplied items and reason. The amount is always recomputed from
    the supplied items.
    """

    async def execute(self, command: CreateCreditNoteCommandDTO) -> Result[CreditNoteResponseDTO]:
        try:
            invoice, _, error = await self._load_eligible_invoice(
                command.invoice_id, command.account_id
            )
            if error:
                return Return.err(error)

            return await self._issue(
                invoice,
                command.account_id,
                command.items,
                reason=command.reason,
                user_id=command.user_id,
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to create credit note for invoice {command.invoice_id}: {e}")
            return Return.err(self._failed(e))
