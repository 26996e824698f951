"""IssueInvoice Use Case

Fiscally issues an invoice: assigns its number, seals its content with a
hash and freezes it. Corrections afterwards go through credit notes.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.services.audit_log_writer import AuditLogWriter
from src.app.services.invoice_hasher import compute_invoice_hash
from src.app.services.numbering_service import NumberingService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.audit_log import AuditAction
from src.domain.document_counter import DocumentClass
from src.domain.exceptions import DuplicateDocumentNumberError
from src.domain.invoice import InvoiceStatus
from .dtos import IssueInvoiceResponseDTO

logger = logging.getLogger(__name__)


class IssueInvoice:
    """
    Use Case: Issue an invoice (Malta VAT fiscal issuance)

    Business Rules:
    1. Only the owning account can issue its invoice
    2. Issuing an already issued invoice is a benign no-op (INVOICE_ALREADY_ISSUED)
    3. A number is drawn from the account's invoice sequence only if the
       invoice has none; the draw is rolled back with the issuance if it fails
    4. The hash covers the final number and the stored issued_at
    5. The flag flip is a conditional update, so two concurrent issuances of
       the same invoice cannot both succeed
    6. The audit entry is best effort and never undoes the issuance

    Flow:
    1. Load invoice (locked) and its items
    2. Return INVOICE_ALREADY_ISSUED if already issued
    3. Determine the invoice number (existing or next in sequence)
    4. Compute the fiscal hash
    5. Conditionally mark issued (status=sent); retry generated numbers on collision
    6. Commit transaction
    7. Append "issued" audit entry
    8. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        numbering_service: NumberingService,
        audit_writer: AuditLogWriter,
        invoice_prefix: str = "INV-",
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.numbering_service = numbering_service
        self.audit_writer = audit_writer
        self.invoice_prefix = invoice_prefix

    async def execute(
        self, invoice_id: str, account_id: str, user_id: Optional[str] = None
    ) -> Result[IssueInvoiceResponseDTO]:
        """
        Execute invoice issuance

        Args:
            invoice_id: Invoice to issue
            account_id: Account that must own the invoice
            user_id: Acting user (recorded in the audit trail)

        Returns:
            Result[IssueInvoiceResponseDTO]: Success with the final number, or error
        """
        try:
            # Step 1: Load invoice with row lock
            invoice = await self.invoice_repo.get_by_id(invoice_id, account_id, for_update=True)
            if not invoice:
                return Return.err(
                    Error(
                        code=ErrorCode.INVOICE_NOT_FOUND,
                        message=f"Invoice {invoice_id} not found",
                        reason="Invoice does not exist or belongs to another account",
                    )
                )

            # Step 2: Already issued is informational, not a failure
            if invoice.is_issued:
                return Return.err(self._already_issued(invoice.invoice_number, invoice.issued_at))

            items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)

            # Step 3: Existing number, or next from the account's sequence
            generated = not invoice.invoice_number
            if generated:
                base_number = await self.numbering_service.next_number(
                    account_id, DocumentClass.INVOICE, self.invoice_prefix
                )
                candidates: Iterable[str] = self.numbering_service.collision_candidates(base_number)
            else:
                base_number = invoice.invoice_number
                candidates = [base_number]

            issued_at = datetime.utcnow()
            final_number = None
            invoice_hash = None
            flipped = None

            for candidate in candidates:
                # Step 4: Hash exactly what is about to be persisted
                candidate_hash = compute_invoice_hash(
                    invoice, items, invoice_number=candidate, issued_at=issued_at
                )

                # Step 5: Conditional flip of the fiscal flag
                try:
                    flipped = await self.invoice_repo.mark_issued(
                        invoice_id=invoice.id,
                        owner_id=account_id,
                        invoice_number=candidate,
                        issued_at=issued_at,
                        invoice_hash=candidate_hash,
                    )
                except DuplicateDocumentNumberError:
                    continue

                final_number = candidate
                invoice_hash = candidate_hash
                break

            if flipped is None:
                await self.uow.rollback()
                logger.error(
                    f"Could not issue invoice {invoice.id}: number {base_number} and its "
                    f"fallbacks are already in use for account {account_id}"
                )
                return Return.err(
                    Error(
                        code=ErrorCode.DOCUMENT_NUMBER_COLLISION,
                        message=f"Invoice number {base_number} is already in use. Please try again.",
                        reason=f"generated={generated}",
                    )
                )

            if not flipped:
                # Lost the race against a concurrent issuance
                await self.uow.rollback()
                return Return.err(self._already_issued(invoice.invoice_number, None))

            # Step 6: Commit the issuance
            await self.uow.commit()
            logger.info(f"Invoice {invoice.id} issued as {final_number} for account {account_id}")

            # Step 7: Audit entry (best effort)
            warnings = []
            warning = await self.audit_writer.record(
                invoice_id=invoice.id,
                user_id=user_id,
                action=AuditAction.ISSUED,
                new_data={
                    "invoice_number": final_number,
                    "amount": invoice.amount,
                    "total_amount": invoice.total_amount,
                    "customer_id": invoice.customer_id,
                    "issued_at": issued_at.isoformat(),
                    "invoice_hash": invoice_hash,
                },
            )
            if warning:
                warnings.append(warning)

            # Step 8: Build response
            return Return.ok(
                IssueInvoiceResponseDTO(
                    invoice_id=invoice.id,
                    invoice_number=final_number,
                    status=InvoiceStatus.SENT.value,
                    is_issued=True,
                    issued_at=issued_at,
                    invoice_hash=invoice_hash,
                    message=f"Invoice {final_number} is now immutable and compliant "
                            f"with Malta VAT regulations.",
                    warnings=warnings,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            logger.error(f"Failed to issue invoice {invoice_id}: {e}")
            return Return.err(
                Error(
                    code=ErrorCode.ISSUE_INVOICE_FAILED,
                    message="Failed to issue invoice",
                    reason=str(e),
                )
            )

    @staticmethod
    def _already_issued(invoice_number: Optional[str], issued_at: Optional[datetime]) -> Error:
        label = f"Invoice {invoice_number}" if invoice_number else "This invoice"
        return Error(
            code=ErrorCode.INVOICE_ALREADY_ISSUED,
            message=f"{label} has already been issued and is immutable. "
                    f"To correct it, create a credit note.",
            reason=f"issued_at={issued_at.isoformat() if issued_at else 'concurrent'}",
        )
