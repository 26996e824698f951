"""CanEditInvoice Use Case

Edit lock check used by every path that changes invoice header or item data.
"""

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.invoice_lifecycle import check_can_edit
from .dtos import EditCheckResponseDTO


class CanEditInvoice:
    """
    Use Case: Check whether an invoice may still be edited

    Business Rules:
    1. Only drafts are editable
    2. For anything else the reason names the invoice number and points the
       caller to credit notes
    """

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, invoice_id: str, account_id: str) -> Result[EditCheckResponseDTO]:
        """
        Execute edit check

        Args:
            invoice_id: Invoice to check
            account_id: Account that must own the invoice

        Returns:
            Result[EditCheckResponseDTO]: can_edit flag and reason
        """
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id, account_id)
            if not invoice:
                return Return.err(
                    Error(
                        code=ErrorCode.INVOICE_NOT_FOUND,
                        message=f"Invoice {invoice_id} not found",
                        reason="Invoice does not exist or belongs to another account",
                    )
                )

            check = check_can_edit(invoice)
            return Return.ok(
                EditCheckResponseDTO(
                    invoice_id=invoice.id,
                    can_edit=check.can_edit,
                    reason=check.reason,
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code=ErrorCode.CHECK_EDITABLE_FAILED,
                    message="Failed to check invoice status",
                    reason=str(e),
                )
            )
