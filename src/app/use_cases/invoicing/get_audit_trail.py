"""GetInvoiceAuditTrail Use Case

Returns the append-only audit trail of an invoice.
"""

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.audit_log_repository import AuditLogRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from .dtos import AuditTrailResponseDTO
from .mappers import to_audit_entry


class GetInvoiceAuditTrail:
    """
    Use Case: List audit entries of an invoice

    Business Rules:
    1. Scoped to the owning account
    2. Entries are returned in append order (oldest first)
    """

    def __init__(self, invoice_repo: InvoiceRepository, audit_repo: AuditLogRepository):
        self.invoice_repo = invoice_repo
        self.audit_repo = audit_repo

    async def execute(self, invoice_id: str, account_id: str) -> Result[AuditTrailResponseDTO]:
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

            entries = await self.audit_repo.get_by_invoice_id(invoice.id)
            return Return.ok(
                AuditTrailResponseDTO(
                    invoice_id=invoice.id,
                    entries=[to_audit_entry(entry) for entry in entries],
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code=ErrorCode.GET_AUDIT_TRAIL_FAILED,
                    message="Failed to load audit trail",
                    reason=str(e),
                )
            )
