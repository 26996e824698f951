"""UpdateInvoiceStatus Use Case

Moves the domain status of an issued invoice forward (payment, overdue,
cancellation) without touching its fiscal content.
"""

import logging
from typing import Optional

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.audit_log_writer import AuditLogWriter
from src.app.services.invoice_lifecycle import can_transition
from src.app.services.unit_of_work import UnitOfWork
from src.domain.audit_log import AuditAction
from src.domain.invoice import InvoiceStatus
from .dtos import UpdateInvoiceStatusResponseDTO

logger = logging.getLogger(__name__)


class UpdateInvoiceStatus:
    """
    Use Case: Change the domain status of an issued invoice

    Business Rules:
    1. draft -> sent happens only through IssueInvoice
    2. sent -> paid | overdue | cancelled, overdue -> paid | cancelled
    3. paid and cancelled are terminal
    4. The fiscal flag, number, hash and amounts are untouched
    5. A "status_changed" audit entry is appended (best effort)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        audit_writer: AuditLogWriter,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.audit_writer = audit_writer

    async def execute(
        self,
        invoice_id: str,
        account_id: str,
        new_status: InvoiceStatus,
        user_id: Optional[str] = None,
    ) -> Result[UpdateInvoiceStatusResponseDTO]:
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

            previous_status = invoice.status
            if not invoice.is_issued or not can_transition(previous_status, new_status):
                hint = " Issue the invoice first." if not invoice.is_issued else ""
                return Return.err(
                    Error(
                        code=ErrorCode.INVALID_STATUS_TRANSITION,
                        message=f"Cannot change invoice status from '{previous_status.value}' "
                                f"to '{new_status.value}'.{hint}",
                        reason=f"is_issued={invoice.is_issued}",
                    )
                )

            invoice.status = new_status
            await self.invoice_repo.update(invoice)
            await self.uow.commit()
            logger.info(
                f"Invoice {invoice.id} status {previous_status.value} -> {new_status.value}"
            )

            warnings = []
            warning = await self.audit_writer.record(
                invoice_id=invoice.id,
                user_id=user_id,
                action=AuditAction.STATUS_CHANGED,
                new_data={"status": new_status.value, "invoice_number": invoice.invoice_number},
                old_data={"status": previous_status.value},
            )
            if warning:
                warnings.append(warning)

            return Return.ok(
                UpdateInvoiceStatusResponseDTO(
                    invoice_id=invoice.id,
                    previous_status=previous_status.value,
                    status=new_status.value,
                    warnings=warnings,
                )
            )

        except Exception as e:
            await self.uow.rollback()
            return Return.err(
                Error(
                    code=ErrorCode.UPDATE_STATUS_FAILED,
                    message="Failed to update invoice status",
                    reason=str(e),
                )
            )
