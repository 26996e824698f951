"""UpdateDraftInvoice Use Case

Edits a draft invoice's header and items, behind the edit lock.
"""

from typing import Any, Dict, Optional

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.services.audit_log_writer import AuditLogWriter
from src.app.services.invoice_lifecycle import check_can_edit, draft_totals
from src.app.services.unit_of_work import UnitOfWork
from src.domain.audit_log import AuditAction
from src.domain.invoice import Invoice
from .create_draft_invoice import build_invoice_items
from .dtos import InvoiceResponseDTO, UpdateDraftInvoiceCommandDTO
from .mappers import to_invoice_response


def _header_snapshot(invoice: Invoice, item_count: int) -> Dict[str, Any]:
    return {
        "customer_id": invoice.customer_id,
        "invoice_date": invoice.invoice_date,
        "due_date": invoice.due_date,
        "vat_rate": invoice.vat_rate,
        "amount": invoice.amount,
        "vat_amount": invoice.vat_amount,
        "total_amount": invoice.total_amount,
        "item_count": item_count,
    }


class UpdateDraftInvoice:
    """
    Use Case: Edit a draft invoice

    Business Rules:
    1. Refused with INVOICE_NOT_EDITABLE unless the edit lock allows it
    2. Provided items replace the whole item list
    3. Header totals are re-derived from the items
    4. A "modified" audit entry is appended (best effort)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        audit_writer: AuditLogWriter,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.audit_writer = audit_writer

    async def execute(
        self,
        invoice_id: str,
        account_id: str,
        command: UpdateDraftInvoiceCommandDTO,
        user_id: Optional[str] = None,
    ) -> Result[InvoiceResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, account_id, for_update=True)
            if not invoice:
                return Return.err(
                    Error(
                        code=ErrorCode.INVOICE_NOT_FOUND,
                        message=f"Invoice {invoice_id} not found",
                        reason="Invoice does not exist or belongs to another account",
                    )
                )

            check = check_can_edit(invoice)
            if not check.can_edit:
                return Return.err(
                    Error(
                        code=ErrorCode.INVOICE_NOT_EDITABLE,
                        message=check.reason,
                        reason=f"status={invoice.status.value}, is_issued={invoice.is_issued}",
                    )
                )

            items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)
            old_data = _header_snapshot(invoice, len(items))

            if command.customer_id is not None:
                invoice.customer_id = command.customer_id
            if command.invoice_date is not None:
                invoice.invoice_date = command.invoice_date
            if command.due_date is not None:
                invoice.due_date = command.due_date
            if command.vat_rate is not None:
                invoice.vat_rate = command.vat_rate

            if command.items is not None:
                await self.invoice_item_repo.delete_by_invoice_id(invoice.id)
                new_items = build_invoice_items(invoice.id, command.items)
                items = await self.invoice_item_repo.create_many(new_items) if new_items else []

            invoice.amount, invoice.vat_amount, invoice.total_amount = draft_totals(
                items, invoice.vat_rate
            )
            updated_invoice = await self.invoice_repo.update(invoice)
            await self.uow.commit()

            warnings = []
            warning = await self.audit_writer.record(
                invoice_id=updated_invoice.id,
                user_id=user_id,
                action=AuditAction.MODIFIED,
                new_data=_header_snapshot(updated_invoice, len(items)),
                old_data=old_data,
            )
            if warning:
                warnings.append(warning)

            return Return.ok(to_invoice_response(updated_invoice, items, warnings))

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.UPDATE_INVOICE_FAILED,
                    message="Failed to update invoice",
                    reason=str(e),
                )
            )
