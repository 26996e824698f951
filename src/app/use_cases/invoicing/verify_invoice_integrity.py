"""VerifyInvoiceIntegrity Use Case

Detects post-issuance tampering by recomputing the fiscal hash from the
invoice's current stored values.
"""

import logging
from datetime import datetime
from typing import Optional

from src.libs.result import Result, Return, Error
from src.app.errors import ErrorCode
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_item_repository import InvoiceItemRepository
from src.app.services.compliance_alert_service import ComplianceAlertService, IntegrityAlert
from src.app.services.invoice_hasher import compute_invoice_hash
from .dtos import IntegrityCheckResponseDTO

logger = logging.getLogger(__name__)


class VerifyInvoiceIntegrity:
    """
    Use Case: Verify the fiscal hash of an invoice

    Business Rules:
    1. No stored hash (never issued) -> is_valid=False, neutral message
    2. Mismatch -> is_valid=False, integrity_warning=True, compliance alert
    3. Read-only: a mismatch is reported, never corrected
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        invoice_item_repo: InvoiceItemRepository,
        alert_service: Optional[ComplianceAlertService] = None,
    ):
        self.invoice_repo = invoice_repo
        self.invoice_item_repo = invoice_item_repo
        self.alert_service = alert_service

    async def execute(self, invoice_id: str, account_id: str) -> Result[IntegrityCheckResponseDTO]:
        """
        Execute integrity verification

        Args:
            invoice_id: Invoice to verify
            account_id: Account that must own the invoice

        Returns:
            Result[IntegrityCheckResponseDTO]: Verification outcome
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

            if not invoice.invoice_hash:
                return Return.ok(
                    IntegrityCheckResponseDTO(
                        invoice_id=invoice.id,
                        is_valid=False,
                        message="Invoice has not been issued yet; there is no hash to verify.",
                    )
                )

            items = await self.invoice_item_repo.get_by_invoice_id(invoice.id)
            calculated_hash = compute_invoice_hash(invoice, items)

            if calculated_hash == invoice.invoice_hash:
                return Return.ok(
                    IntegrityCheckResponseDTO(
                        invoice_id=invoice.id,
                        is_valid=True,
                        stored_hash=invoice.invoice_hash,
                        calculated_hash=calculated_hash,
                        message=f"Invoice {invoice.invoice_number} matches its issued content.",
                    )
                )

            logger.warning(
                f"Integrity check failed for invoice {invoice.id} ({invoice.invoice_number}): "
                f"stored={invoice.invoice_hash}, calculated={calculated_hash}"
            )
            await self._alert(invoice, calculated_hash)

            return Return.ok(
                IntegrityCheckResponseDTO(
                    invoice_id=invoice.id,
                    is_valid=False,
                    stored_hash=invoice.invoice_hash,
                    calculated_hash=calculated_hash,
                    integrity_warning=True,
                    message="Invoice data may have been modified after issuance.",
                )
            )

        except Exception as e:
            return Return.err(
                Error(
                    code=ErrorCode.VERIFY_INTEGRITY_FAILED,
                    message="Failed to verify invoice integrity",
                    reason=str(e),
                )
            )

    async def _alert(self, invoice, calculated_hash: str) -> None:
        if not self.alert_service:
            return
        try:
            await self.alert_service.send_integrity_alert(
                IntegrityAlert(
                    invoice_id=invoice.id,
                    owner_id=invoice.owner_id,
                    invoice_number=invoice.invoice_number,
                    stored_hash=invoice.invoice_hash,
                    calculated_hash=calculated_hash,
                    detected_at=datetime.utcnow(),
                )
            )
        except Exception as e:
            logger.error(f"Failed to send integrity alert for invoice {invoice.id}: {e}")
